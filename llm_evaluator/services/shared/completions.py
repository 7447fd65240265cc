"""채팅 완성(chat completion) 호출과 응답 형태 해석."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

import httpx
from pydantic import BaseModel, Field, ValidationError

from llm_evaluator.utils.logger import get_logger

from .errors import ConfigurationError, UpstreamError, UpstreamTimeoutError

logger = get_logger(__name__)


class ResponseShape(str, Enum):
    """알려진 공급자 응답 형태."""

    CHAT_COMPLETIONS = "chat_completions"  # {"choices": [{"message": {"content": ...}}]}
    FLAT = "flat"  # {"response": ...}


class _Message(BaseModel):
    content: str | None = None


class _Choice(BaseModel):
    message: _Message


class ChatCompletionsPayload(BaseModel):
    choices: list[_Choice] = Field(..., min_length=1)


class FlatPayload(BaseModel):
    response: str


def _from_chat_completions(payload: Any) -> str | None:
    try:
        parsed = ChatCompletionsPayload.model_validate(payload)
    except ValidationError:
        return None
    return parsed.choices[0].message.content or None


def _from_flat(payload: Any) -> str | None:
    try:
        parsed = FlatPayload.model_validate(payload)
    except ValidationError:
        return None
    return parsed.response or None


_EXTRACTORS: dict[ResponseShape, Callable[[Any], str | None]] = {
    ResponseShape.CHAT_COMPLETIONS: _from_chat_completions,
    ResponseShape.FLAT: _from_flat,
}


def detect_shape(payload: Any) -> ResponseShape | None:
    """본문이 비어 있지 않은 첫 번째 형태를 고른다 (chat_completions 우선)."""

    for shape, extractor in _EXTRACTORS.items():
        if extractor(payload):
            return shape
    return None


def extract_completion(payload: Any, shape: ResponseShape | None = None) -> str | None:
    """응답 본문에서 완성 텍스트를 꺼낸다. 형태를 모르면 감지해서 사용한다."""

    resolved = shape or detect_shape(payload)
    if resolved is None:
        return None
    return _EXTRACTORS[resolved](payload)


def _preview(text: str, limit: int = 300) -> str:
    return text if len(text) <= limit else text[:limit] + "…"


async def post_chat_completion(
    client: httpx.AsyncClient,
    endpoint: str,
    body: dict[str, Any],
    *,
    api_key: str | None = None,
    label: str = "llm",
) -> Any:
    """채팅 완성 요청을 한 번 보낸다. 재시도하지 않는다.

    Returns:
        JSON 응답 본문. 본문이 JSON이 아니면 None.

    Raises:
        ConfigurationError: 엔드포인트 URL이 잘못됨.
        UpstreamTimeoutError: 시간 초과.
        UpstreamError: 연결 실패 또는 성공이 아닌 HTTP 상태(상태/본문 포함).
    """

    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    logger.debug("post_chat_completion:시작 label=%s endpoint=%s model=%s", label, endpoint, body.get("model"))
    try:
        resp = await client.post(endpoint, json=body, headers=headers)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"invalid {label} endpoint: {endpoint}", stage="request") from exc
    except httpx.TimeoutException as exc:
        logger.error("post_chat_completion:시간 초과 label=%s endpoint=%s", label, endpoint)
        raise UpstreamTimeoutError(f"{label} request timed out: {exc}", stage="request") from exc
    except httpx.HTTPError as exc:
        logger.error("post_chat_completion:연결 실패 label=%s endpoint=%s err=%s", label, endpoint, exc)
        raise UpstreamError(f"{label} request failed: {exc}", stage="request") from exc

    if not resp.is_success:
        text = resp.text
        logger.error(
            "post_chat_completion:업스트림 오류 label=%s status=%s body=%s",
            label,
            resp.status_code,
            _preview(text),
        )
        raise UpstreamError(
            f"{label} returned {resp.status_code}: {text}",
            stage="upstream",
            upstream_status=resp.status_code,
            raw_text=text,
            status_code=resp.status_code if resp.status_code >= 400 else 502,
        )

    try:
        data = resp.json()
    except ValueError:
        logger.warning("post_chat_completion:JSON 아님 label=%s body=%s", label, _preview(resp.text))
        return None
    logger.info("post_chat_completion:성공 label=%s status=%s", label, resp.status_code)
    return data


__all__ = [
    "ResponseShape",
    "ChatCompletionsPayload",
    "FlatPayload",
    "detect_shape",
    "extract_completion",
    "post_chat_completion",
]
