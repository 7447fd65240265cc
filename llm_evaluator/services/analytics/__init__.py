"""집계/분석 패키지."""

from .aggregate import (
    UNKNOWN,
    average_scores,
    build_analytics,
    filter_evaluations,
    model_statistics,
    monthly_trend,
    overall_summary,
    question_statistics,
    score_distribution,
    score_matrix,
)
from .joins import join_evaluations, load_detailed_evaluations

__all__ = [
    "UNKNOWN",
    "average_scores",
    "build_analytics",
    "filter_evaluations",
    "join_evaluations",
    "load_detailed_evaluations",
    "model_statistics",
    "monthly_trend",
    "overall_summary",
    "question_statistics",
    "score_distribution",
    "score_matrix",
]
