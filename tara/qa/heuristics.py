# tara/qa/heuristics.py
from __future__ import annotations
import math
import re
from typing import Any, Optional
from .markers import MarkerTables, default_markers

# ---------------------------------------------------------------------------
# Rule-based quality signals. Every function returns a float in [0, 1] for any
# input; None (or any non-string) is read as text before scoring.
# ---------------------------------------------------------------------------

SENTENCE_END_RE = re.compile(r"[।.!]$")
SENTENCE_SPLIT_RE = re.compile(r"[।.!?]+")
EXPLANATION_MIN_CHARS = 50

def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)

def clamp01(value: Any) -> float:
    """Coerce to float in [0, 1]; anything non-numeric or NaN becomes 0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v):
        return 0.0
    return max(0.0, min(1.0, v))

def relevance(question: Any, answer: Any, markers: Optional[MarkerTables] = None) -> float:
    """
    Keyword overlap: share of question tokens (longer than 2 chars, not a
    stop word) that appear verbatim among the answer's whitespace tokens.
    """
    q, a = _text(question), _text(answer)
    if not q or not a:
        return 0.0
    stop = (markers or default_markers()).relevance_stopwords
    q_words = [w for w in q.lower().split() if len(w) > 2 and w not in stop]
    if not q_words:
        return 0.0
    a_words = set(a.lower().split())
    overlap = sum(1 for w in q_words if w in a_words)
    return clamp01(overlap / len(q_words))

def language_quality(answer: Any, language: Any, markers: Optional[MarkerTables] = None) -> float:
    """0.8 if a marker word of the language shows up in the answer, else 0.4."""
    a = _text(answer)
    if not a:
        return 0.0
    expected = (markers or default_markers()).language_markers(_text(language))
    return 0.8 if any(w in a for w in expected) else 0.4

def cultural_relevance(answer: Any, language: Any, markers: Optional[MarkerTables] = None) -> float:
    a = _text(answer).lower()
    if not a:
        return 0.0
    found = [m for m in (markers or default_markers()).cultural_markers(_text(language)) if m.lower() in a]
    # two distinct hits saturate
    return clamp01(len(found) / 2)

def completeness(answer: Any) -> float:
    a = _text(answer)
    if not a:
        return 0.0
    has_conclusion = bool(SENTENCE_END_RE.search(a.strip()))
    has_explanation = len(a) > EXPLANATION_MIN_CHARS
    return (0.5 if has_conclusion else 0.0) + (0.5 if has_explanation else 0.0)

def clarity(answer: Any) -> float:
    """Step function over mean characters per sentence; run-ons score lowest."""
    a = _text(answer)
    if not a:
        return 0.0
    sentences = [s for s in SENTENCE_SPLIT_RE.split(a) if s.strip()]
    if not sentences:
        return 0.0
    avg_len = len(a) / len(sentences)
    if avg_len > 150:
        return 0.3
    if avg_len > 100:
        return 0.6
    if avg_len > 50:
        return 0.9
    return 0.7
