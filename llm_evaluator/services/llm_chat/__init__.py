"""LLM 응답 수집 패키지."""

from .client import NO_CONTENT_FALLBACK, ChatResult, build_chat_body, fetch_llm_response

__all__ = ["NO_CONTENT_FALLBACK", "ChatResult", "build_chat_body", "fetch_llm_response"]
