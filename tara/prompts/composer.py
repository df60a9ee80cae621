from __future__ import annotations
from functools import lru_cache
from importlib import resources
from jinja2 import Environment, BaseLoader
from ..domain.catalog import Subject, Grade, COMPLEXITY_GUIDANCE, DEFAULT_COMPLEXITY

_env = Environment(loader=BaseLoader(), autoescape=False, trim_blocks=True, lstrip_blocks=True)

def render_template(src: str, **kwargs) -> str:
    return _env.from_string(src).render(**kwargs)

@lru_cache()
def load_template(name: str) -> str:
    return resources.files("tara.prompts.templates").joinpath(name).read_text(encoding="utf-8")

def compose_system(*, subject: Subject, language_name: str, grade: Grade | None) -> str:
    return render_template(
        load_template("system.j2"),
        persona=subject.persona, language_name=language_name,
        grade_name=grade.name if grade else None,
    ).strip()

def compose_user(*, question: str, subject: Subject, language_name: str, grade: Grade | None) -> str:
    complexity = grade.complexity if grade else DEFAULT_COMPLEXITY
    return render_template(
        load_template("user.j2"),
        question=question, subject_name=subject.name, subject_icon=subject.icon,
        language_name=language_name, grade_name=grade.name if grade else None,
        complexity_guidance=COMPLEXITY_GUIDANCE.get(complexity, COMPLEXITY_GUIDANCE[DEFAULT_COMPLEXITY]),
    ).strip()
