"""API 요청/응답 스키마 패키지."""

from .catalog import (
    EnvironmentCreate,
    EnvironmentUpdate,
    EvaluatorCreate,
    EvaluatorUpdate,
    LLMModelCreate,
    LLMModelUpdate,
    PromptCreate,
    PromptUpdate,
    QuestionCreate,
    QuestionUpdate,
)
from .common import (
    DeleteResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    NonBlankStr,
    RawText,
    StorageStatusResponse,
)
from .evaluation import (
    AutoEvaluateRequest,
    AutoEvaluateResponse,
    ChatRequest,
    ChatResponse,
    EvaluationCreate,
    EvaluatorConfigUpdate,
    EvaluatorConfigView,
)

__all__ = [
    "AutoEvaluateRequest",
    "AutoEvaluateResponse",
    "ChatRequest",
    "ChatResponse",
    "DeleteResponse",
    "EnvironmentCreate",
    "EnvironmentUpdate",
    "ErrorCode",
    "ErrorResponse",
    "EvaluationCreate",
    "EvaluatorConfigUpdate",
    "EvaluatorConfigView",
    "EvaluatorCreate",
    "EvaluatorUpdate",
    "HealthResponse",
    "LLMModelCreate",
    "LLMModelUpdate",
    "NonBlankStr",
    "RawText",
    "PromptCreate",
    "PromptUpdate",
    "QuestionCreate",
    "QuestionUpdate",
    "StorageStatusResponse",
]
