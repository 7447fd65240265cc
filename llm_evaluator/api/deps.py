"""라우트 공용 의존성.

리소스는 `create_app`이 한 번 만들어 `app.state`에 올려두고, 여기서는 꺼내기만 한다.
"""

from __future__ import annotations

import httpx
from fastapi import Request

from llm_evaluator.repositories import Repositories
from llm_evaluator.utils.config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repositories(request: Request) -> Repositories:
    return request.app.state.repositories


def get_http_client(request: Request) -> httpx.AsyncClient:
    """업스트림 LLM 호출에 공유하는 AsyncClient."""

    return request.app.state.http_client


__all__ = ["get_http_client", "get_repositories", "get_settings"]
