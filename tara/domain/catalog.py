from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

@dataclass(frozen=True)
class Language:
    code: str
    name: str
    voice: str
    locale: str

@dataclass(frozen=True)
class Subject:
    code: str
    name: str
    icon: str
    persona: str
    keywords: Tuple[str, ...] = ()

@dataclass(frozen=True)
class Grade:
    code: int
    name: str
    complexity: str

LANGUAGES: Dict[str, Language] = {
    "hi": Language("hi", "Hindi", "hi-IN-Wavenet-A", "hi-IN"),
    "ta": Language("ta", "Tamil", "ta-IN-Wavenet-A", "ta-IN"),
    "bn": Language("bn", "Bengali", "bn-IN-Wavenet-A", "bn-IN"),
    "te": Language("te", "Telugu", "te-IN-Standard-A", "te-IN"),
    "mr": Language("mr", "Marathi", "mr-IN-Wavenet-A", "mr-IN"),
    "gu": Language("gu", "Gujarati", "gu-IN-Wavenet-A", "gu-IN"),
    "kn": Language("kn", "Kannada", "kn-IN-Wavenet-A", "kn-IN"),
    "ml": Language("ml", "Malayalam", "ml-IN-Wavenet-A", "ml-IN"),
    "en": Language("en", "English", "en-IN-Wavenet-A", "en-IN"),
}
DEFAULT_LANGUAGE = "hi"

SUBJECTS: Dict[str, Subject] = {
    "math": Subject(
        "math", "Mathematics", "🔢",
        "You are Tara, a fun-loving female math teacher who makes numbers feel like friends! "
        "You use everyday examples and gentle humor to make math less scary.",
        ("math", "algebra", "geometry", "calculus", "trigonometry", "arithmetic",
         "equation", "formula", "theorem", "proof"),
    ),
    "physics": Subject(
        "physics", "Physics", "⚗️",
        "You are Tara, an enthusiastic female physics teacher who finds magic in everyday phenomena! "
        "You explain complex concepts with fun analogies and relatable examples.",
        ("physics", "force", "energy", "motion", "electricity", "magnetism", "waves",
         "optics", "thermodynamics", "mechanics"),
    ),
    "chemistry": Subject(
        "chemistry", "Chemistry", "🧪",
        "You are Tara, a witty female chemistry teacher who treats molecules like characters in a story! "
        "You make chemical reactions sound like exciting adventures.",
        ("chemistry", "element", "compound", "reaction", "bond", "molecule", "atom",
         "periodic", "acid", "base"),
    ),
    "general": Subject(
        "general", "General Studies", "📚",
        "You are Tara, a knowledgeable and humorous female teacher who can make any topic "
        "interesting with stories, jokes, and relatable examples from daily life.",
    ),
}
GENERAL_SUBJECT = "general"

GRADES: Dict[int, Grade] = {
    6: Grade(6, "Class 6", "basic"),
    7: Grade(7, "Class 7", "basic"),
    8: Grade(8, "Class 8", "intermediate"),
    9: Grade(9, "Class 9", "intermediate"),
    10: Grade(10, "Class 10", "advanced"),
    11: Grade(11, "Class 11", "advanced"),
    12: Grade(12, "Class 12", "expert"),
}
DEFAULT_COMPLEXITY = "intermediate"

COMPLEXITY_GUIDANCE = {
    "basic": "Use very simple words with fun examples from cartoons, games, or sweets!",
    "intermediate": "Explain clearly with fun, relatable examples.",
    "advanced": "Include detailed explanations but with relatable comparisons from daily life.",
    "expert": "Provide comprehensive analysis but keep it conversational with smart humor.",
}

def language_name(code: str | None) -> str:
    lang = LANGUAGES.get(code or "")
    return lang.name if lang else LANGUAGES[DEFAULT_LANGUAGE].name

def detect_subject(question: str) -> str:
    """First subject whose keyword appears in the question; otherwise general."""
    q = (question or "").lower()
    for code, subj in SUBJECTS.items():
        if code == GENERAL_SUBJECT:
            continue
        if any(k in q for k in subj.keywords):
            return code
    return GENERAL_SUBJECT

def get_subject(code: str | None) -> Subject:
    return SUBJECTS.get(code or "", SUBJECTS[GENERAL_SUBJECT])

def get_grade(code: int | None) -> Optional[Grade]:
    return GRADES.get(code) if code is not None else None
