"""평가 레코드에 질문/모델/환경을 조인한다."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from llm_evaluator.models import (
    DetailedEvaluation,
    Evaluation,
    EvaluationEnvironment,
    LLMModel,
    Question,
)
from llm_evaluator.repositories import Repositories


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def join_evaluations(
    evaluations: Iterable[Evaluation],
    questions: Iterable[Question],
    models: Iterable[LLMModel],
    environments: Iterable[EvaluationEnvironment] = (),
) -> list[DetailedEvaluation]:
    """참조 대상이 삭제된 경우 해당 조인 필드는 None으로 둔다. 최신 평가가 앞에 온다."""

    question_map = {q.id: q for q in questions}
    model_map = {m.id: m for m in models}
    environment_map = {e.id: e for e in environments}
    detailed = [
        DetailedEvaluation(
            **evaluation.model_dump(),
            question=question_map.get(evaluation.question_id),
            model=model_map.get(evaluation.model_id),
            environment=environment_map.get(evaluation.environment_id) if evaluation.environment_id else None,
        )
        for evaluation in evaluations
    ]
    detailed.sort(key=lambda item: _as_utc(item.evaluated_at), reverse=True)
    return detailed


async def load_detailed_evaluations(
    repos: Repositories,
    question_id: str | None = None,
    model_id: str | None = None,
) -> list[DetailedEvaluation]:
    evaluations = await repos.evaluations.list_filtered(question_id=question_id, model_id=model_id)
    return join_evaluations(
        evaluations,
        await repos.questions.get_all(),
        await repos.models.get_all(),
        await repos.environments.get_all(),
    )


__all__ = ["join_evaluations", "load_detailed_evaluations"]
