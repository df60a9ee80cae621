from __future__ import annotations
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

METRIC_WEIGHTS: Dict[str, float] = {
    "relevance": 0.30,
    "language_quality": 0.25,
    "cultural_context": 0.20,
    "completeness": 0.15,
    "clarity": 0.10,
}

class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

class QualityMetrics(_Camel):
    relevance: float = Field(default=0.0, ge=0, le=1)
    language_quality: float = Field(default=0.0, ge=0, le=1)
    cultural_context: float = Field(default=0.0, ge=0, le=1)
    completeness: float = Field(default=0.0, ge=0, le=1)
    clarity: float = Field(default=0.0, ge=0, le=1)

class QualityScore(_Camel):
    """
    Result of scoring one answer. Always well formed: a failure while scoring
    produces an all-zero score with `error` set instead of an exception.
    """
    overall_score: float = Field(default=0.0, ge=0, le=1)
    metrics: QualityMetrics = Field(default_factory=QualityMetrics)
    error: Optional[str] = Field(default=None, exclude=True)

    @property
    def degraded(self) -> bool:
        return self.error is not None

    @classmethod
    def zero(cls, error: str | None = None) -> "QualityScore":
        return cls(overall_score=0.0, metrics=QualityMetrics(), error=error)
