"""엔티티별 리포지토리."""

from __future__ import annotations

from llm_evaluator.models import (
    Evaluation,
    EvaluationEnvironment,
    EvaluationPrompt,
    Evaluator,
    LLMModel,
    Question,
)

from .base import CollectionRepository


class LLMModelRepository(CollectionRepository[LLMModel]):
    model = LLMModel
    collection_key = "models"


class QuestionRepository(CollectionRepository[Question]):
    model = Question
    collection_key = "questions"


class EvaluationEnvironmentRepository(CollectionRepository[EvaluationEnvironment]):
    model = EvaluationEnvironment
    collection_key = "evaluation-environments"


class EvaluatorRepository(CollectionRepository[Evaluator]):
    model = Evaluator
    collection_key = "evaluators"


class EvaluationPromptRepository(CollectionRepository[EvaluationPrompt]):
    model = EvaluationPrompt
    collection_key = "evaluation-prompts"

    async def get_default(self) -> EvaluationPrompt | None:
        """목록의 첫 번째(가장 최근) 프롬프트."""

        prompts = await self.get_all()
        return prompts[0] if prompts else None


class EvaluationRepository(CollectionRepository[Evaluation]):
    model = Evaluation
    collection_key = "evaluations"
    timestamp_field = "evaluated_at"

    async def list_filtered(
        self,
        question_id: str | None = None,
        model_id: str | None = None,
    ) -> list[Evaluation]:
        """질문/모델 id로 거른 평가 목록. 두 조건은 AND로 결합된다."""

        evaluations = await self.get_all()
        if question_id:
            evaluations = [e for e in evaluations if e.question_id == question_id]
        if model_id:
            evaluations = [e for e in evaluations if e.model_id == model_id]
        return evaluations


__all__ = [
    "LLMModelRepository",
    "QuestionRepository",
    "EvaluationEnvironmentRepository",
    "EvaluatorRepository",
    "EvaluationPromptRepository",
    "EvaluationRepository",
]
