# tara/api/dependencies.py
from __future__ import annotations
from functools import lru_cache
from ..stores.interaction_store import InteractionStore
from ..analytics.service import LearningAnalytics
from ..qa.scorer import ResponseQualityScorer, default_scorer

# Single shared instances; tests swap them through app.dependency_overrides.

@lru_cache()
def get_store() -> InteractionStore:
    return InteractionStore()

def get_scorer() -> ResponseQualityScorer:
    return default_scorer()

def get_analytics() -> LearningAnalytics:
    return LearningAnalytics(get_store())
