"""등록된 LLM 엔드포인트에 질문을 보내고 답변 텍스트를 받는다."""

from __future__ import annotations

import time
from dataclasses import dataclass

import httpx

from llm_evaluator.repositories import LLMModelRepository
from llm_evaluator.services.shared.completions import extract_completion, post_chat_completion
from llm_evaluator.services.shared.errors import InputValidationError, ReferenceNotFoundError
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 2000
NO_CONTENT_FALLBACK = "レスポンスを取得できませんでした"


@dataclass
class ChatResult:
    response: str
    model_name: str
    processing_time: float


def build_chat_body(model_name: str, message: str) -> dict:
    return {
        "model": model_name,
        "messages": [{"role": "user", "content": message}],
        "temperature": CHAT_TEMPERATURE,
        "max_tokens": CHAT_MAX_TOKENS,
    }


async def fetch_llm_response(
    models: LLMModelRepository,
    http_client: httpx.AsyncClient,
    model_id: str,
    message: str,
) -> ChatResult:
    """모델 id로 엔드포인트를 찾아 한 번 호출한다. 결과는 저장하지 않는다.

    Raises:
        ReferenceNotFoundError: 모델이 없음.
        InputValidationError: 모델에 엔드포인트가 설정되지 않음.
        UpstreamError: 업스트림이 실패 상태를 반환함(상태/본문 그대로 전달).
    """

    logger.debug("fetch_llm_response:시작 model_id=%s", model_id)
    model = await models.get_by_id(model_id)
    if model is None:
        raise ReferenceNotFoundError(f"model not found: {model_id}", stage="model")
    if not model.endpoint:
        raise InputValidationError(f"model endpoint not configured: {model.name}", stage="model")

    started = time.perf_counter()
    data = await post_chat_completion(
        http_client,
        model.endpoint,
        build_chat_body(model.name, message),
        api_key=model.api_key,
        label=f"llm:{model.name}",
    )
    elapsed = round(time.perf_counter() - started, 3)

    content = extract_completion(data)
    if content is None:
        logger.warning("fetch_llm_response:완성 텍스트 없음 model=%s", model.name)
        content = NO_CONTENT_FALLBACK
    logger.info("fetch_llm_response:성공 model=%s elapsed=%.3fs chars=%d", model.name, elapsed, len(content))
    return ChatResult(response=content, model_name=model.name, processing_time=elapsed)


__all__ = ["CHAT_MAX_TOKENS", "CHAT_TEMPERATURE", "ChatResult", "NO_CONTENT_FALLBACK", "build_chat_body", "fetch_llm_response"]
