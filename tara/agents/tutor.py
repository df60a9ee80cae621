from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional
from ..prompts.composer import compose_system, compose_user
from ..services.llm import llm_chat
from ..domain.catalog import get_subject, get_grade, language_name
from ..errors import AnswerGenerationError
from ..config import settings

log = logging.getLogger(__name__)

@dataclass
class TutorAnswer:
    answer: str
    subject: str
    subject_name: str
    grade: Optional[str]
    tokens_used: Optional[int]
    latency_ms: float

async def answer_question(*, question: str, language: str, subject: str, grade: int | None) -> TutorAnswer:
    subj = get_subject(subject)
    grade_info = get_grade(grade)
    lang_name = language_name(language)
    system = compose_system(subject=subj, language_name=lang_name, grade=grade_info)
    user = compose_user(question=question, subject=subj, language_name=lang_name, grade=grade_info)
    try:
        out = await llm_chat(
            system, user,
            model=settings.model_answer,
            temperature=settings.answer_temperature,
            max_tokens=settings.answer_max_tokens,
            presence_penalty=settings.answer_presence_penalty,
            frequency_penalty=settings.answer_frequency_penalty,
        )
    except Exception as e:
        raise AnswerGenerationError("Failed to generate answer") from e
    if not out.text:
        raise AnswerGenerationError("Model returned an empty answer")
    return TutorAnswer(
        answer=out.text,
        subject=subj.code,
        subject_name=subj.name,
        grade=grade_info.name if grade_info else None,
        tokens_used=out.tokens_used,
        latency_ms=out.latency_ms,
    )
