# tara/analytics/feedback.py
"""
Feedback analytics over interaction records.

All functions here are pure reducers over an in-memory collection: callers
fetch the raw records (see `tara.analytics.service`) and grouping happens in
process, never in the store.
"""
from __future__ import annotations
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import numpy as np

from ..models.interaction import (
    InteractionRecord, FeedbackAggregate, SegmentKey, KnowledgeGap, GapKey,
    RetrainCriteria, RetrainReason, RetrainDecision, TrainingExample, ChatMessage,
    as_utc, utcnow,
)

POSITIVE_MIN_RATING = 4
NEGATIVE_MAX_RATING = 2
GAP_MIN_RETRIES = 2

TUTOR_PERSONA = "You are Tara, an Indian female AI tutor teaching {subject} in {language}."

def _mean(values: Sequence[float]) -> Optional[float]:
    # mirrors a document-store $avg: missing values are skipped, empty -> None
    if not values:
        return None
    return float(np.mean(np.asarray(values, dtype="float64")))

def within_window(records: Iterable[InteractionRecord], days: int, now: Optional[datetime] = None) -> List[InteractionRecord]:
    start = as_utc(now or utcnow()) - timedelta(days=days)
    return [r for r in records if r.timestamp >= start]

def _aggregate(key: Tuple, rows: List[InteractionRecord]) -> FeedbackAggregate:
    ratings = [r.user_rating for r in rows if r.user_rating is not None]
    return FeedbackAggregate(
        segment=SegmentKey(language=key[0], subject=key[1], grade=key[2]),
        avg_rating=_mean(ratings),
        total_interactions=len(rows),
        positive_count=sum(1 for x in ratings if x >= POSITIVE_MIN_RATING),
        negative_count=sum(1 for x in ratings if x <= NEGATIVE_MAX_RATING),
        avg_response_time=_mean([r.response_time for r in rows if r.response_time is not None]),
        avg_tokens_used=_mean([r.tokens_used for r in rows if r.tokens_used is not None]),
        common_issues=[r.user_feedback for r in rows if r.user_feedback],
    )

def aggregate_feedback(records: Iterable[InteractionRecord]) -> List[FeedbackAggregate]:
    """
    Group by (language, subject, grade) and sort worst-rated first.
    Segments without any rating go last.
    """
    groups: Dict[Tuple, List[InteractionRecord]] = OrderedDict()
    for r in records:
        groups.setdefault((r.language, r.subject, r.grade), []).append(r)
    rows = [_aggregate(k, v) for k, v in groups.items()]
    rows.sort(key=lambda a: (a.avg_rating is None, a.avg_rating if a.avg_rating is not None else 0.0))
    return rows

def analyze_user_feedback(records: Iterable[InteractionRecord], time_range_days: int = 30,
                          now: Optional[datetime] = None) -> List[FeedbackAggregate]:
    return aggregate_feedback(within_window(records, time_range_days, now))

def is_knowledge_gap(r: InteractionRecord) -> bool:
    return (
        (r.user_rating is not None and r.user_rating <= NEGATIVE_MAX_RATING)
        or r.retry_count >= GAP_MIN_RETRIES
        or bool(r.flagged_for_review)
    )

def identify_knowledge_gaps(records: Iterable[InteractionRecord]) -> List[KnowledgeGap]:
    """Struggling segments by (subject, language, concept difficulty), most frequent first."""
    groups: Dict[Tuple, List[InteractionRecord]] = OrderedDict()
    for r in records:
        if is_knowledge_gap(r):
            groups.setdefault((r.subject, r.language, r.concept_difficulty), []).append(r)
    gaps = [
        KnowledgeGap(
            segment=GapKey(subject=k[0], language=k[1], concept_difficulty=k[2]),
            count=len(rows),
            questions=[r.question for r in rows],
            avg_retries=_mean([r.retry_count for r in rows]) or 0.0,
        )
        for k, rows in groups.items()
    ]
    gaps.sort(key=lambda g: g.count, reverse=True)
    return gaps

def decide_retrain(aggregates: Iterable[FeedbackAggregate],
                   criteria: Optional[RetrainCriteria] = None) -> RetrainDecision:
    """
    Flag a segment when its negative-rating ratio exceeds the threshold on
    enough volume. Decides only; nothing is triggered from here.
    """
    criteria = criteria or RetrainCriteria()
    reasons: List[RetrainReason] = []
    for a in aggregates:
        if a.total_interactions <= 0:
            continue
        ratio = a.negative_count / a.total_interactions
        if ratio > criteria.low_rating_threshold and a.total_interactions > criteria.volume_threshold:
            reasons.append(RetrainReason(
                category=f"{a.segment.subject}-{a.segment.language}",
                issue="High negative feedback ratio",
                ratio=ratio,
                interactions=a.total_interactions,
            ))
    return RetrainDecision(should_tune=bool(reasons), reasons=reasons, criteria=criteria)

def should_retrain(records: Iterable[InteractionRecord], now: Optional[datetime] = None,
                   criteria: Optional[RetrainCriteria] = None, window_days: int = 7) -> RetrainDecision:
    return decide_retrain(analyze_user_feedback(records, window_days, now), criteria)

def generate_training_data(records: Iterable[InteractionRecord], min_rating: float = 4,
                           max_tokens: int = 500, min_quality: float = 0.8) -> List[TrainingExample]:
    """Well-rated, short, high-quality exchanges in chat fine-tuning format."""
    out: List[TrainingExample] = []
    for r in records:
        if r.user_rating is None or r.user_rating < min_rating:
            continue
        if r.tokens_used is None or r.tokens_used > max_tokens:
            continue
        if r.response_quality is None or r.response_quality < min_quality:
            continue
        out.append(TrainingExample(
            messages=[
                ChatMessage(role="system", content=TUTOR_PERSONA.format(subject=r.subject, language=r.language)),
                ChatMessage(role="user", content=r.question),
                ChatMessage(role="assistant", content=r.answer),
            ],
            metadata={"rating": r.user_rating, "subject": r.subject, "language": r.language, "grade": r.grade},
        ))
    return out
