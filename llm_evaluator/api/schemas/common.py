"""공통 요청/응답 스키마."""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, StringConstraints

from llm_evaluator.services.shared.errors import ErrorCode

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _reject_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


# 공백만 있는 값은 거절하되 원문(앞뒤 공백/줄바꿈 포함)은 그대로 보존한다
RawText = Annotated[str, AfterValidator(_reject_blank)]


class ErrorResponse(BaseModel):
    """FastAPI에서 사용하는 에러 응답 포맷."""

    status: str = Field("error", description="에러 상태.", examples=["error"])
    error_code: ErrorCode = Field(..., description="표준 에러 코드.", examples=["UPSTREAM_ERROR"])
    detail: str = Field(..., description="에러 메시지.")
    stage: str | None = Field(
        None,
        description="실패 단계(input/config/prompt/request/upstream/parse/validate/storage 등).",
        examples=["parse"],
    )
    upstream_status: int | None = Field(None, description="업스트림 LLM이 돌려준 HTTP 상태.", examples=[503])
    raw_text: str | None = Field(None, description="해석에 실패한 원문(진단용).")


class HealthResponse(BaseModel):
    """헬스 체크 응답."""

    status: str = Field(..., description="서비스 상태. 정상일 경우 'ok'.", examples=["ok"])


class DeleteResponse(BaseModel):
    success: bool = True


class StorageStatusResponse(BaseModel):
    """저장소 백엔드와 컬렉션 크기 (비밀값 없음)."""

    backend: str = Field(..., examples=["local", "upstash"])
    collections: dict[str, int] = Field(default_factory=dict)


__all__ = [
    "DeleteResponse",
    "ErrorCode",
    "ErrorResponse",
    "HealthResponse",
    "NonBlankStr",
    "RawText",
    "StorageStatusResponse",
]
