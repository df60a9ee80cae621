from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ..config import settings
from ..stores.interaction_store import InteractionStore
from ..models.interaction import (
    FeedbackAggregate, KnowledgeGap, RetrainCriteria, RetrainDecision, TrainingExample, as_utc, utcnow,
)
from . import feedback

log = logging.getLogger(__name__)

def criteria_from_settings() -> RetrainCriteria:
    return RetrainCriteria(
        low_rating_threshold=settings.retrain_low_rating_threshold,
        volume_threshold=settings.retrain_volume_threshold,
        improvement_potential=settings.retrain_improvement_potential,
    )

class LearningAnalytics:
    """Fetches raw interaction records from the store and reduces them in process."""

    def __init__(self, store: Optional[InteractionStore] = None, criteria: Optional[RetrainCriteria] = None):
        self.store = store or InteractionStore()
        self.criteria = criteria or criteria_from_settings()

    async def _since(self, days: int, now: Optional[datetime]) -> tuple[datetime, list]:
        now = as_utc(now or utcnow())
        return now, await self.store.list_since(now - timedelta(days=days))

    async def analyze_user_feedback(self, time_range_days: Optional[int] = None,
                                    now: Optional[datetime] = None) -> List[FeedbackAggregate]:
        days = time_range_days or settings.feedback_window_days
        now, records = await self._since(days, now)
        rows = feedback.analyze_user_feedback(records, days, now)
        log.info("analytics.feedback", extra={"days": days, "records": len(records), "segments": len(rows)})
        return rows

    async def identify_knowledge_gaps(self) -> List[KnowledgeGap]:
        records = await self.store.list_all()
        return feedback.identify_knowledge_gaps(records)

    async def should_retrain(self, now: Optional[datetime] = None) -> RetrainDecision:
        days = settings.retrain_window_days
        now, records = await self._since(days, now)
        decision = feedback.should_retrain(records, now=now, criteria=self.criteria, window_days=days)
        if decision.should_tune:
            log.warning("analytics.retrain_signal", extra={"segments": [r.category for r in decision.reasons]})
        return decision

    async def generate_training_data(self, min_rating: float = 4, max_tokens: int = 500,
                                     min_quality: float = 0.8) -> List[TrainingExample]:
        records = await self.store.list_all()
        return feedback.generate_training_data(records, min_rating, max_tokens, min_quality)
