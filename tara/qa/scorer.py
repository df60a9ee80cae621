# tara/qa/scorer.py
from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional
from .markers import MarkerTables, default_markers
from .types import METRIC_WEIGHTS, QualityMetrics, QualityScore
from . import heuristics as h

log = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

class ResponseQualityScorer:
    """
    Weighted combination of the rule-based heuristics.

    Marker tables and weights are fixed at construction; `score` is a pure
    function of its arguments, so one instance can be shared freely.
    """

    def __init__(self, markers: Optional[MarkerTables] = None, weights: Optional[Mapping[str, float]] = None):
        self.markers = markers or default_markers()
        self.weights: Dict[str, float] = dict(weights or METRIC_WEIGHTS)
        unknown = set(self.weights) - set(METRIC_WEIGHTS)
        if unknown:
            raise ValueError(f"unknown metric weights: {sorted(unknown)}")

    def metrics(self, question: Any, answer: Any, language: Any) -> QualityMetrics:
        q = h._text(question)
        a = h._text(answer)
        lang = h._text(language) or DEFAULT_LANGUAGE
        return QualityMetrics(
            relevance=h.clamp01(h.relevance(q, a, self.markers)),
            language_quality=h.clamp01(h.language_quality(a, lang, self.markers)),
            cultural_context=h.clamp01(h.cultural_relevance(a, lang, self.markers)),
            completeness=h.clamp01(h.completeness(a)),
            clarity=h.clamp01(h.clarity(a)),
        )

    def score(self, question: Any, answer: Any, language: Any = DEFAULT_LANGUAGE,
              subject: Any = None) -> QualityScore:
        # no heuristic looks at `subject`
        try:
            m = self.metrics(question, answer, language)
            values = m.model_dump()
            overall = sum(values[k] * self.weights.get(k, 0.0) for k in values)
            return QualityScore(overall_score=h.clamp01(overall), metrics=m)
        except Exception as e:
            log.warning("quality scoring failed; returning zero score", extra={"error": repr(e)})
            return QualityScore.zero(error=repr(e))

_default: Optional[ResponseQualityScorer] = None

def default_scorer() -> ResponseQualityScorer:
    global _default
    if _default is None:
        _default = ResponseQualityScorer()
    return _default

def score_response_quality(question: Any, answer: Any, language: Any = DEFAULT_LANGUAGE,
                           subject: Any = None) -> QualityScore:
    return default_scorer().score(question, answer, language, subject)
