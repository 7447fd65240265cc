"""평가 모델 응답 전처리/해석/검증.

1. 마크다운 코드 펜스를 벗겨 파싱 가능한 부분 문자열을 복원한다.
2. JSON 객체로 파싱한다. 실패하면 `ParseError`.
3. `GradingOutput`으로 네 항목 점수를 엄격히 검증한다. 누락/비숫자/범위 밖이면
   `InvalidScoreError`. 점수를 보정(clamp)하거나 형변환하지 않는다.
"""

from __future__ import annotations

import json
import re
from typing import Annotated, Any, Union

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, Strict, ValidationError, field_validator

from llm_evaluator.models import SCORE_FIELDS, EvaluationScores
from llm_evaluator.services.shared.errors import InvalidScoreError, ParseError

SCORE_MIN = 1
SCORE_MAX = 5

_FENCE_OPEN = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?[ \t]*```$")

# bool/문자열은 거절. 정수는 float로 바꾸지 않고 그대로 비교한다
GradeValue = Union[Annotated[int, Strict()], Annotated[float, Strict(), AllowInfNan(False)]]


class GradingOutput(BaseModel):
    """평가 모델 출력 스키마. `overall` 등 나머지 키는 무시한다."""

    model_config = ConfigDict(extra="ignore")

    accuracy: GradeValue = Field(..., description="정확성(1~5)")
    completeness: GradeValue = Field(..., description="완전성(1~5)")
    logic: GradeValue = Field(..., description="논리성(1~5)")
    japanese: GradeValue = Field(..., description="일본어 품질(1~5)")
    comments: Any = Field(default=None, description="항목별 코멘트(객체일 때만 사용)")

    @field_validator(*SCORE_FIELDS)
    @classmethod
    def _in_range(cls, value: int | float) -> int | float:
        if not SCORE_MIN <= value <= SCORE_MAX:
            raise ValueError(f"out of range [{SCORE_MIN}, {SCORE_MAX}]: {value}")
        return value


def strip_code_fence(text: str) -> str:
    """앞뒤 공백을 제거하고, 코드 펜스로 시작하면 여는/닫는 펜스를 떼어낸다.

    펜스가 없는 입력은 공백 제거 외에 바뀌지 않는다.
    """

    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned.rstrip(), count=1)
    return cleaned.strip()


def parse_grading_text(text: str) -> dict[str, Any]:
    """완성 텍스트를 JSON 객체로 해석한다."""

    cleaned = strip_code_fence(text)
    try:
        parsed = json.loads(cleaned)
    except ValueError as exc:
        # JSONDecodeError 외에 정수 자릿수 제한 초과도 ValueError로 올라온다
        if isinstance(exc, json.JSONDecodeError):
            reason = f"{exc.msg} (line {exc.lineno}, column {exc.colno})"
        else:
            reason = str(exc)
        raise ParseError(
            f"grading response is not valid JSON: {reason}",
            stage="parse",
            raw_text=text,
        ) from exc
    if not isinstance(parsed, dict):
        raise ParseError(
            f"grading response must be a JSON object, got {type(parsed).__name__}",
            stage="parse",
            raw_text=text,
        )
    return parsed


def _describe_grading_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        # 유니온 분기 이름(int/float)은 빼고 필드명만 남긴다
        field = str(error["loc"][0]) if error.get("loc") else "?"
        parts.append(f"{field}: {error.get('msg', 'invalid')}")
    return "; ".join(dict.fromkeys(parts))


def validate_scores(parsed: dict[str, Any], raw_text: str | None = None) -> EvaluationScores:
    """네 항목이 모두 1~5 범위의 숫자인지 확인하고 총점을 파생한다."""

    try:
        output = GradingOutput.model_validate(parsed)
    except ValidationError as exc:
        raise InvalidScoreError(
            f"invalid score fields: {_describe_grading_errors(exc)}",
            stage="validate",
            raw_text=raw_text,
        ) from exc
    return EvaluationScores(**{field: getattr(output, field) for field in SCORE_FIELDS})


def extract_comments(parsed: dict[str, Any]) -> dict[str, Any]:
    comments = parsed.get("comments")
    return comments if isinstance(comments, dict) else {}


__all__ = [
    "GradingOutput",
    "SCORE_MAX",
    "SCORE_MIN",
    "extract_comments",
    "parse_grading_text",
    "strip_code_fence",
    "validate_scores",
]
