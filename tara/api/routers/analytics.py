# tara/api/routers/analytics.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
import logging
from tara.analytics.service import LearningAnalytics
from tara.api.dependencies import get_analytics
from tara.models.interaction import FeedbackAggregate, KnowledgeGap, RetrainDecision, TrainingExample

router = APIRouter(prefix="/api/analytics", tags=["analytics"])
logger = logging.getLogger(__name__)

@router.get("/feedback", response_model=List[FeedbackAggregate])
async def feedback(days: int = Query(default=30, ge=1, le=365),
                   analytics: LearningAnalytics = Depends(get_analytics)):
    try:
        return await analytics.analyze_user_feedback(days)
    except Exception as e:
        logger.exception("/api/analytics/feedback failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/knowledge-gaps", response_model=List[KnowledgeGap])
async def knowledge_gaps(analytics: LearningAnalytics = Depends(get_analytics)):
    try:
        return await analytics.identify_knowledge_gaps()
    except Exception as e:
        logger.exception("/api/analytics/knowledge-gaps failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/should-retrain", response_model=RetrainDecision)
async def should_retrain(analytics: LearningAnalytics = Depends(get_analytics)):
    try:
        return await analytics.should_retrain()
    except Exception as e:
        logger.exception("/api/analytics/should-retrain failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/training-data", response_model=List[TrainingExample])
async def training_data(min_rating: float = Query(default=4, ge=0, le=5),
                        max_tokens: int = Query(default=500, ge=1),
                        min_quality: float = Query(default=0.8, ge=0, le=1),
                        analytics: LearningAnalytics = Depends(get_analytics)):
    try:
        return await analytics.generate_training_data(min_rating, max_tokens, min_quality)
    except Exception as e:
        logger.exception("/api/analytics/training-data failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
