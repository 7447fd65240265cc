"""LLM 호출/자동 평가/평가 저장 요청·응답 스키마."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from llm_evaluator.models import CamelModel, EvaluationComments, EvaluationScores, EvaluatorConfig

from .common import NonBlankStr, RawText


class ChatRequest(CamelModel):
    """등록 모델 호출 요청."""

    model_id: NonBlankStr = Field(..., description="등록된 LLM 모델 id")
    message: RawText = Field(..., description="질문 본문")


class ChatResponse(CamelModel):
    response: str
    model_name: str
    processing_time: float = Field(..., description="업스트림 호출 소요 시간(초)")


class AutoEvaluateRequest(CamelModel):
    """평가 모델 채점 요청."""

    question_content: RawText
    llm_response: RawText
    prompt_id: str | None = Field(None, description="생략 시 첫 번째 평가 프롬프트 사용")


class AutoEvaluateResponse(CamelModel):
    scores: EvaluationScores
    comments: dict[str, Any] = Field(default_factory=dict)
    prompt_used: str


class EvaluationCreate(CamelModel):
    """평가 저장 요청. `scores.overall`은 서버에서 다시 계산된다."""

    question_id: NonBlankStr
    model_id: NonBlankStr
    response: RawText
    scores: EvaluationScores
    comments: EvaluationComments = Field(default_factory=EvaluationComments)
    environment_id: str | None = None
    evaluator: str | None = None
    processing_time: float | None = Field(None, ge=0)


class EvaluatorConfigUpdate(CamelModel):
    endpoint: NonBlankStr
    api_key: NonBlankStr
    model: NonBlankStr


class EvaluatorConfigView(CamelModel):
    """API 키를 가린 설정 표현."""

    id: str
    name: str
    endpoint: str
    model: str
    api_key_configured: bool
    api_key_masked: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_config(cls, config: EvaluatorConfig) -> "EvaluatorConfigView":
        return cls(
            id=config.id,
            name=config.name,
            endpoint=config.endpoint,
            model=config.model,
            api_key_configured=bool(config.api_key),
            api_key_masked=mask_secret(config.api_key),
            created_at=config.created_at,
        )


def mask_secret(secret: str | None) -> str | None:
    if not secret:
        return None
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:3]}...{secret[-4:]}"


__all__ = [
    "AutoEvaluateRequest",
    "AutoEvaluateResponse",
    "ChatRequest",
    "ChatResponse",
    "EvaluationCreate",
    "EvaluatorConfigUpdate",
    "EvaluatorConfigView",
    "mask_secret",
]
