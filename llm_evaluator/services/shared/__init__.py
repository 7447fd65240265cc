"""공통 유틸 패키지."""

from .completions import ResponseShape, detect_shape, extract_completion
from .errors import (
    ConfigurationError,
    ErrorCode,
    EvaluatorAppError,
    ForbiddenError,
    InputValidationError,
    InvalidScoreError,
    NotFoundError,
    ParseError,
    ReferenceNotFoundError,
    StorageError,
    UpstreamError,
    UpstreamTimeoutError,
)
from .prompts import DEFAULT_PROMPT_NAME, load_prompt

__all__ = [
    "ResponseShape",
    "detect_shape",
    "extract_completion",
    "ConfigurationError",
    "ErrorCode",
    "EvaluatorAppError",
    "ForbiddenError",
    "InputValidationError",
    "InvalidScoreError",
    "NotFoundError",
    "ParseError",
    "ReferenceNotFoundError",
    "StorageError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "DEFAULT_PROMPT_NAME",
    "load_prompt",
]
