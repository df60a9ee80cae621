# tara/models/interaction.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(ts: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class InteractionRecord(CamelModel):
    """One question/answer exchange plus the feedback it later received."""
    id: str = Field(default_factory=lambda: uuid4().hex)
    question: str = ""
    answer: str = ""
    language: str = "hi"
    subject: Optional[str] = None
    grade: Optional[int] = None
    user_rating: Optional[float] = None
    user_feedback: Optional[str] = None
    was_helpful: Optional[bool] = None
    retry_count: int = 0
    flagged_for_review: bool = False
    concept_difficulty: Optional[str] = None
    response_time: Optional[float] = None      # milliseconds
    tokens_used: Optional[int] = None
    response_quality: Optional[float] = None
    quality_metrics: Optional[Dict[str, float]] = None
    time_spent_reading: Optional[float] = None
    audio_played_to_end: Optional[bool] = None
    voice_interrupted: Optional[bool] = None
    timestamp: datetime = Field(default_factory=utcnow)

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)

class FeedbackUpdate(CamelModel):
    user_rating: Optional[float] = Field(default=None, ge=1, le=5)
    user_feedback: Optional[str] = None
    was_helpful: Optional[bool] = None
    flagged_for_review: Optional[bool] = None
    time_spent_reading: Optional[float] = None
    audio_played_to_end: Optional[bool] = None
    voice_interrupted: Optional[bool] = None

    @field_validator("user_rating", mode="before")
    @classmethod
    def _no_stars(cls, v):
        # the star widget sends 0 when nothing was picked
        return None if v == 0 else v

class SegmentKey(CamelModel):
    language: Optional[str] = None
    subject: Optional[str] = None
    grade: Optional[int] = None

class FeedbackAggregate(CamelModel):
    segment: SegmentKey
    avg_rating: Optional[float] = None
    total_interactions: int = 0
    positive_count: int = 0
    negative_count: int = 0
    avg_response_time: Optional[float] = None
    avg_tokens_used: Optional[float] = None
    common_issues: List[str] = Field(default_factory=list)

class GapKey(CamelModel):
    subject: Optional[str] = None
    language: Optional[str] = None
    concept_difficulty: Optional[str] = None

class KnowledgeGap(CamelModel):
    segment: GapKey
    count: int = 0
    questions: List[str] = Field(default_factory=list)
    avg_retries: float = 0.0

class RetrainCriteria(CamelModel):
    low_rating_threshold: float = 0.3
    volume_threshold: int = 1000
    improvement_potential: float = 0.2

class RetrainReason(CamelModel):
    category: str
    issue: str
    ratio: float
    interactions: int

class RetrainDecision(CamelModel):
    should_tune: bool = False
    reasons: List[RetrainReason] = Field(default_factory=list)
    criteria: RetrainCriteria = Field(default_factory=RetrainCriteria)

class ChatMessage(BaseModel):
    role: str
    content: str

class TrainingExample(BaseModel):
    messages: List[ChatMessage]
    metadata: Dict[str, object] = Field(default_factory=dict)
