"""도메인별 라우터."""

from .catalog import environments_router, evaluators_router, models_router, prompts_router, questions_router
from .evaluations import router as evaluations_router
from .evaluator import router as evaluator_router
from .llm import router as llm_router

__all__ = [
    "environments_router",
    "evaluations_router",
    "evaluator_router",
    "evaluators_router",
    "llm_router",
    "models_router",
    "prompts_router",
    "questions_router",
]
