from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# 리포 루트를 모듈 경로에 추가해 `llm_evaluator` 임포트가 보장되도록 함
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from llm_evaluator.main import create_app  # noqa: E402
from llm_evaluator.repositories import build_repositories  # noqa: E402
from llm_evaluator.storage import InMemoryCollectionStore  # noqa: E402
from llm_evaluator.utils.config import Settings  # noqa: E402


class FakeUpstream:
    """`httpx.MockTransport`로 LLM/평가 엔드포인트를 흉내 낸다.

    `queue_json`/`queue_text`로 넣은 응답을 순서대로 돌려주고, 받은 요청은 `requests`에 쌓는다.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response | Exception] = []

    def queue_json(self, payload: Any, status_code: int = 200) -> None:
        self._responses.append(httpx.Response(status_code, json=payload))

    def queue_text(self, text: str, status_code: int = 200) -> None:
        self._responses.append(httpx.Response(status_code, text=text))

    def queue_completion(self, content: str) -> None:
        self.queue_json({"choices": [{"message": {"role": "assistant", "content": content}}]})

    def queue_error(self, exc: Exception) -> None:
        self._responses.append(exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(500, text="no queued response")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def last_json(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="development",
        storage_backend="local",
        data_dir=str(tmp_path / "data"),
        openai_api_key=None,
        seed_default_prompt=False,
        callback_base_url=None,
    )


@pytest.fixture
def store() -> InMemoryCollectionStore:
    return InMemoryCollectionStore()


@pytest.fixture
def repos(store, settings):
    return build_repositories(store, settings)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def http_client(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
def app(settings, store, http_client):
    return create_app(settings, store=store, http_client=http_client)


@pytest_asyncio.fixture
async def client(app) -> AsyncClient:
    """ASGI 클라이언트를 제공한다."""

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
