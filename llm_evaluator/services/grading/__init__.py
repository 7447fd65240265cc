"""자동 평가(채점) 패키지."""

from .engine import (
    GRADING_MAX_TOKENS,
    GRADING_TEMPERATURE,
    AutoEvaluationResult,
    auto_evaluate,
    build_grading_body,
    render_grading_prompt,
)
from .parsing import extract_comments, parse_grading_text, strip_code_fence, validate_scores

__all__ = [
    "GRADING_MAX_TOKENS",
    "GRADING_TEMPERATURE",
    "AutoEvaluationResult",
    "auto_evaluate",
    "build_grading_body",
    "render_grading_prompt",
    "extract_comments",
    "parse_grading_text",
    "strip_code_fence",
    "validate_scores",
]
