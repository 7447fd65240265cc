"""리포지토리 패키지와 프로세스 시작 시 한 번 만드는 컨테이너."""

from __future__ import annotations

from dataclasses import dataclass

from llm_evaluator.storage import CollectionStore
from llm_evaluator.utils.config import Settings

from .base import CollectionRepository, generate_id, utc_now
from .entities import (
    EvaluationEnvironmentRepository,
    EvaluationPromptRepository,
    EvaluationRepository,
    EvaluatorRepository,
    LLMModelRepository,
    QuestionRepository,
)
from .evaluator_config import EvaluatorConfigRepository


@dataclass
class Repositories:
    """하나의 저장소를 공유하는 리포지토리 묶음."""

    store: CollectionStore
    models: LLMModelRepository
    questions: QuestionRepository
    environments: EvaluationEnvironmentRepository
    evaluators: EvaluatorRepository
    prompts: EvaluationPromptRepository
    evaluations: EvaluationRepository
    evaluator_config: EvaluatorConfigRepository


def build_repositories(store: CollectionStore, settings: Settings) -> Repositories:
    return Repositories(
        store=store,
        models=LLMModelRepository(store),
        questions=QuestionRepository(store),
        environments=EvaluationEnvironmentRepository(store),
        evaluators=EvaluatorRepository(store),
        prompts=EvaluationPromptRepository(store),
        evaluations=EvaluationRepository(store),
        evaluator_config=EvaluatorConfigRepository(store, settings),
    )


__all__ = [
    "CollectionRepository",
    "EvaluationEnvironmentRepository",
    "EvaluationPromptRepository",
    "EvaluationRepository",
    "EvaluatorConfigRepository",
    "EvaluatorRepository",
    "LLMModelRepository",
    "QuestionRepository",
    "Repositories",
    "build_repositories",
    "generate_id",
    "utc_now",
]
