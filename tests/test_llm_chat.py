from __future__ import annotations

import httpx
import pytest

from llm_evaluator.services.llm_chat import NO_CONTENT_FALLBACK, fetch_llm_response
from llm_evaluator.services.shared.completions import ResponseShape, detect_shape, extract_completion
from llm_evaluator.services.shared.errors import InputValidationError, ReferenceNotFoundError, UpstreamError


def test_extract_completion_known_shapes() -> None:
    chat = {"choices": [{"message": {"content": "four"}}]}
    flat = {"response": "four"}
    assert detect_shape(chat) == ResponseShape.CHAT_COMPLETIONS
    assert detect_shape(flat) == ResponseShape.FLAT
    assert extract_completion(chat) == "four"
    assert extract_completion(flat) == "four"
    assert extract_completion({"choices": []}) is None
    assert extract_completion({"output": "four"}) is None
    assert extract_completion(None) is None


@pytest.mark.asyncio
async def test_fetch_llm_response_chat_completions(repos, http_client, upstream) -> None:
    model = await repos.models.create(
        {"name": "llama3", "endpoint": "http://localhost:11434/v1/chat/completions", "api_key": "k-1"}
    )
    upstream.queue_json({"choices": [{"message": {"content": "2+2 = 4"}}]})

    result = await fetch_llm_response(repos.models, http_client, model.id, "What is 2+2?")

    assert result.response == "2+2 = 4"
    assert result.model_name == "llama3"
    assert result.processing_time >= 0
    body = upstream.last_json()
    assert body == {
        "model": "llama3",
        "messages": [{"role": "user", "content": "What is 2+2?"}],
        "temperature": 0.7,
        "max_tokens": 2000,
    }
    assert upstream.requests[-1].headers["Authorization"] == "Bearer k-1"


@pytest.mark.asyncio
async def test_fetch_llm_response_flat_shape_without_key(repos, http_client, upstream) -> None:
    model = await repos.models.create({"name": "local", "endpoint": "http://localhost:8080/generate"})
    upstream.queue_json({"response": "4"})

    result = await fetch_llm_response(repos.models, http_client, model.id, "2+2?")

    assert result.response == "4"
    assert "Authorization" not in upstream.requests[-1].headers


@pytest.mark.asyncio
async def test_fetch_llm_response_fallback_text(repos, http_client, upstream) -> None:
    model = await repos.models.create({"name": "odd", "endpoint": "http://localhost:8080/odd"})
    upstream.queue_json({"output": "4"})

    result = await fetch_llm_response(repos.models, http_client, model.id, "2+2?")
    assert result.response == NO_CONTENT_FALLBACK


@pytest.mark.asyncio
async def test_fetch_llm_response_unknown_model(repos, http_client) -> None:
    with pytest.raises(ReferenceNotFoundError):
        await fetch_llm_response(repos.models, http_client, "missing", "hi")


@pytest.mark.asyncio
async def test_fetch_llm_response_without_endpoint(repos, http_client, upstream) -> None:
    model = await repos.models.create({"name": "no-endpoint"})
    with pytest.raises(InputValidationError):
        await fetch_llm_response(repos.models, http_client, model.id, "hi")
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_fetch_llm_response_propagates_upstream_status(repos, http_client, upstream) -> None:
    model = await repos.models.create({"name": "busy", "endpoint": "http://localhost:8080/busy"})
    upstream.queue_text("model overloaded", status_code=503)

    with pytest.raises(UpstreamError) as exc_info:
        await fetch_llm_response(repos.models, http_client, model.id, "hi")
    assert exc_info.value.status_code == 503
    assert exc_info.value.raw_text == "model overloaded"


@pytest.mark.asyncio
async def test_fetch_llm_response_connection_error(repos, http_client, upstream) -> None:
    model = await repos.models.create({"name": "down", "endpoint": "http://localhost:9/down"})
    upstream.queue_error(httpx.ConnectError("refused"))

    with pytest.raises(UpstreamError) as exc_info:
        await fetch_llm_response(repos.models, http_client, model.id, "hi")
    assert exc_info.value.status_code == 502
    assert exc_info.value.stage == "request"
