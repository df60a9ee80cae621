from __future__ import annotations
import logging
import langid
from ..domain.catalog import LANGUAGES, DEFAULT_LANGUAGE, SUBJECTS, detect_subject

log = logging.getLogger(__name__)

# only ever answer with a language Tara can speak
langid.set_languages(list(LANGUAGES))

def detect_lang(text: str) -> str:
    if not (text or "").strip():
        return DEFAULT_LANGUAGE
    try:
        lang, _ = langid.classify(text)
    except Exception as e:
        log.warning("router.detect_lang failed: %r", e)
        return DEFAULT_LANGUAGE
    return lang if lang in LANGUAGES else DEFAULT_LANGUAGE

def decide_language(text: str, hint: str | None) -> str:
    if hint:
        return hint
    return detect_lang(text)

def decide_subject(question: str, hint: str | None) -> str:
    if hint and hint in SUBJECTS:
        return hint
    return detect_subject(question)
