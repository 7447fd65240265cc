"""레코드 모델 패키지."""

from .records import (
    ALL_SCORE_FIELDS,
    SCORE_FIELDS,
    CamelModel,
    DetailedEvaluation,
    Evaluation,
    EvaluationComments,
    EvaluationEnvironment,
    EvaluationPrompt,
    EvaluationScores,
    Evaluator,
    EvaluatorConfig,
    LLMModel,
    Question,
    derive_overall,
    round_half_up,
)

__all__ = [
    "ALL_SCORE_FIELDS",
    "SCORE_FIELDS",
    "CamelModel",
    "DetailedEvaluation",
    "Evaluation",
    "EvaluationComments",
    "EvaluationEnvironment",
    "EvaluationPrompt",
    "EvaluationScores",
    "Evaluator",
    "EvaluatorConfig",
    "LLMModel",
    "Question",
    "derive_overall",
    "round_half_up",
]
