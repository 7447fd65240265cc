"""모델/질문/평가 환경/평가자/평가 프롬프트 생성·수정 스키마.

생성 스키마는 필수 필드가 공백이면 400으로 거절한다. 수정 스키마는 모든 필드가
선택이며, 보낸 필드만 덮어쓴다.
"""

from __future__ import annotations

from llm_evaluator.models import CamelModel

from .common import NonBlankStr


class LLMModelCreate(CamelModel):
    name: NonBlankStr
    endpoint: str | None = None
    api_key: str | None = None
    size: str | None = None
    description: str | None = None


class LLMModelUpdate(CamelModel):
    name: NonBlankStr | None = None
    endpoint: str | None = None
    api_key: str | None = None
    size: str | None = None
    description: str | None = None


class QuestionCreate(CamelModel):
    title: NonBlankStr
    content: NonBlankStr
    category: str | None = None


class QuestionUpdate(CamelModel):
    title: NonBlankStr | None = None
    content: NonBlankStr | None = None
    category: str | None = None


class EnvironmentCreate(CamelModel):
    name: NonBlankStr
    processing_spec: NonBlankStr
    execution_app: NonBlankStr
    description: str | None = None


class EnvironmentUpdate(CamelModel):
    name: NonBlankStr | None = None
    processing_spec: NonBlankStr | None = None
    execution_app: NonBlankStr | None = None
    description: str | None = None


class EvaluatorCreate(CamelModel):
    name: NonBlankStr
    organization: str | None = None
    email: str | None = None
    description: str | None = None


class EvaluatorUpdate(CamelModel):
    name: NonBlankStr | None = None
    organization: str | None = None
    email: str | None = None
    description: str | None = None


class PromptCreate(CamelModel):
    name: NonBlankStr
    prompt: NonBlankStr
    description: str | None = None


class PromptUpdate(CamelModel):
    name: NonBlankStr | None = None
    prompt: NonBlankStr | None = None
    description: str | None = None


__all__ = [
    "EnvironmentCreate",
    "EnvironmentUpdate",
    "EvaluatorCreate",
    "EvaluatorUpdate",
    "LLMModelCreate",
    "LLMModelUpdate",
    "PromptCreate",
    "PromptUpdate",
    "QuestionCreate",
    "QuestionUpdate",
]
