"""평가 결과 집계.

모든 함수는 메모리 위의 평가 목록에 대한 순수 함수다. 캐시하지 않고
조회할 때마다 다시 계산한다. 조인 대상이 없으면 이름을 `unknown`으로 표시한다.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Sequence
from datetime import timezone
from typing import Any

from llm_evaluator.models import ALL_SCORE_FIELDS, DetailedEvaluation, round_half_up
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN = "unknown"
DISTRIBUTION_BUCKETS: tuple[int, ...] = (1, 2, 3, 4, 5)


def filter_evaluations(
    rows: Iterable[DetailedEvaluation],
    model_ids: Collection[str] | None = None,
    question_ids: Collection[str] | None = None,
) -> list[DetailedEvaluation]:
    """모델/질문 id 집합 포함 여부로 거른다. 빈 집합이나 None은 필터 없음."""

    model_set = set(model_ids or ())
    question_set = set(question_ids or ())
    return [
        row
        for row in rows
        if (not model_set or row.model_id in model_set) and (not question_set or row.question_id in question_set)
    ]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def average_scores(rows: Sequence[DetailedEvaluation]) -> dict[str, float]:
    """다섯 점수 필드 각각의 산술 평균. 빈 입력이면 빈 dict."""

    if not rows:
        return {}
    return {name: _mean([getattr(row.scores, name) for row in rows]) for name in ALL_SCORE_FIELDS}


def _group_by(rows: Iterable[DetailedEvaluation], key: Callable[[DetailedEvaluation], Any]) -> dict[Any, list[DetailedEvaluation]]:
    # dict 삽입 순서 = 첫 등장 순서
    groups: dict[Any, list[DetailedEvaluation]] = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return groups


def _model_name(row: DetailedEvaluation) -> str:
    return row.model.name if row.model else UNKNOWN


def _question_title(row: DetailedEvaluation) -> str:
    return row.question.title if row.question else UNKNOWN


def model_statistics(rows: Sequence[DetailedEvaluation]) -> list[dict[str, Any]]:
    """모델별 평균 점수와 건수. 평균 총점 내림차순(동점은 등장 순서 유지)."""

    stats = [
        {
            "modelId": model_id,
            "modelName": _model_name(group[0]),
            "count": len(group),
            "averageScores": average_scores(group),
        }
        for model_id, group in _group_by(rows, lambda row: row.model_id).items()
    ]
    stats.sort(key=lambda item: item["averageScores"]["overall"], reverse=True)
    logger.debug("model_statistics:종료 groups=%d", len(stats))
    return stats


def question_statistics(rows: Sequence[DetailedEvaluation]) -> list[dict[str, Any]]:
    """질문별 평균 점수와 건수. 평균 총점 오름차순(어려운 질문이 먼저)."""

    stats = []
    for question_id, group in _group_by(rows, lambda row: row.question_id).items():
        question = group[0].question
        stats.append(
            {
                "questionId": question_id,
                "questionTitle": _question_title(group[0]),
                "category": question.category if question else None,
                "count": len(group),
                "averageScores": average_scores(group),
            }
        )
    stats.sort(key=lambda item: item["averageScores"]["overall"])
    logger.debug("question_statistics:종료 groups=%d", len(stats))
    return stats


def score_matrix(rows: Sequence[DetailedEvaluation]) -> dict[str, Any]:
    """모델 × 질문 평균 총점 행렬.

    평가가 하나 이상 있는 쌍만 셀로 만들고, 축도 실제 등장한 모델/질문으로 한정한다.
    """

    models: dict[str, str] = {}
    questions: dict[str, str] = {}
    for row in rows:
        models.setdefault(row.model_id, _model_name(row))
        questions.setdefault(row.question_id, _question_title(row))

    cells = [
        {
            "modelId": model_id,
            "questionId": question_id,
            "averageOverall": _mean([row.scores.overall for row in group]),
            "count": len(group),
        }
        for (model_id, question_id), group in _group_by(rows, lambda row: (row.model_id, row.question_id)).items()
    ]
    return {
        "models": [{"id": key, "name": name} for key, name in models.items()],
        "questions": [{"id": key, "title": title} for key, title in questions.items()],
        "cells": cells,
    }


def score_distribution(rows: Iterable[DetailedEvaluation]) -> list[dict[str, int]]:
    """총점을 가장 가까운 정수(0.5 올림)로 반올림해 1~5 구간별 건수를 센다."""

    counts = dict.fromkeys(DISTRIBUTION_BUCKETS, 0)
    for row in rows:
        bucket = int(round_half_up(row.scores.overall, 0))
        if bucket in counts:
            counts[bucket] += 1
        else:
            logger.debug("score_distribution:범위 밖 총점 id=%s overall=%s", row.id, row.scores.overall)
    return [{"score": score, "count": count} for score, count in counts.items()]


def _month_key(row: DetailedEvaluation) -> str:
    evaluated_at = row.evaluated_at
    if evaluated_at.tzinfo is not None:
        evaluated_at = evaluated_at.astimezone(timezone.utc)
    return f"{evaluated_at.year}/{evaluated_at.month:02d}"


def monthly_trend(rows: Iterable[DetailedEvaluation]) -> list[dict[str, Any]]:
    """평가 월(`YYYY/MM`, UTC)별 평균 총점과 건수. 시간순."""

    groups = _group_by(rows, _month_key)
    return [
        {
            "month": month,
            "averageOverall": _mean([row.scores.overall for row in groups[month]]),
            "count": len(groups[month]),
        }
        for month in sorted(groups)
    ]


def overall_summary(rows: Sequence[DetailedEvaluation]) -> dict[str, Any]:
    """대시보드 상단 요약: 건수, 모델/질문 수, 전체 평균, 최고 모델."""

    model_stats = model_statistics(rows)
    best = model_stats[0] if model_stats else None
    return {
        "totalEvaluations": len(rows),
        "modelCount": len({row.model_id for row in rows}),
        "questionCount": len({row.question_id for row in rows}),
        "averageScores": average_scores(rows) or None,
        "bestModel": (
            {
                "modelId": best["modelId"],
                "modelName": best["modelName"],
                "averageOverall": best["averageScores"]["overall"],
            }
            if best
            else None
        ),
    }


def build_analytics(
    rows: Iterable[DetailedEvaluation],
    model_ids: Collection[str] | None = None,
    question_ids: Collection[str] | None = None,
) -> dict[str, Any]:
    """필터를 적용한 뒤 모든 집계를 한 번에 계산한다."""

    filtered = filter_evaluations(rows, model_ids, question_ids)
    logger.debug("build_analytics:시작 rows=%d", len(filtered))
    return {
        "summary": overall_summary(filtered),
        "modelStats": model_statistics(filtered),
        "questionStats": question_statistics(filtered),
        "matrix": score_matrix(filtered),
        "distribution": score_distribution(filtered),
        "timeSeries": monthly_trend(filtered),
    }


__all__ = [
    "UNKNOWN",
    "average_scores",
    "build_analytics",
    "filter_evaluations",
    "model_statistics",
    "monthly_trend",
    "overall_summary",
    "question_statistics",
    "score_distribution",
    "score_matrix",
]
