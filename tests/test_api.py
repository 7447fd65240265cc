from __future__ import annotations

import json

import pytest
from httpx import ASGITransport, AsyncClient

from llm_evaluator.main import create_app, seed_default_prompt
from llm_evaluator.services.export import BOM

GRADER_ENDPOINT = "https://grader.example.com/v1/chat/completions"


async def _configure_grader(client: AsyncClient) -> None:
    resp = await client.put(
        "/evaluator/config",
        json={"endpoint": GRADER_ENDPOINT, "apiKey": "sk-test-123456", "model": "grader-1"},
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_health(client) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_model_crud_cycle(client) -> None:
    created = await client.post("/models", json={"name": "llama3", "endpoint": "http://localhost:11434/v1"})
    assert created.status_code == 201
    model = created.json()
    assert model["name"] == "llama3"
    assert model["id"]
    assert model["createdAt"]

    updated = await client.put(f"/models/{model['id']}", json={"size": "8B"})
    assert updated.status_code == 200
    assert updated.json()["size"] == "8B"
    assert updated.json()["endpoint"] == "http://localhost:11434/v1"
    assert updated.json()["createdAt"] == model["createdAt"]

    listed = await client.get("/models")
    assert [m["id"] for m in listed.json()] == [model["id"]]

    deleted = await client.delete(f"/models/{model['id']}")
    assert deleted.json() == {"success": True}
    assert (await client.get(f"/models/{model['id']}")).status_code == 404
    assert (await client.delete(f"/models/{model['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_create_requires_fields(client) -> None:
    resp = await client.post("/questions", json={"title": "Q1"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert "content" in body["detail"]

    blank = await client.post("/models", json={"name": "   "})
    assert blank.status_code == 400

    env = await client.post("/evaluation-environments", json={"name": "GPU", "processingSpec": "A100"})
    assert env.status_code == 400
    assert "executionApp" in env.json()["detail"]


@pytest.mark.asyncio
async def test_update_unknown_id_is_404(client) -> None:
    resp = await client.put("/evaluators/missing", json={"name": "x"})
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_prompt_crud(client) -> None:
    created = await client.post("/evaluator/prompts", json={"name": "strict", "prompt": "{question}/{response}"})
    assert created.status_code == 201
    prompt_id = created.json()["id"]
    assert (await client.get(f"/evaluator/prompts/{prompt_id}")).json()["name"] == "strict"
    assert (await client.put(f"/evaluator/prompts/{prompt_id}", json={"description": "d"})).json()["description"] == "d"
    assert (await client.delete(f"/evaluator/prompts/{prompt_id}")).status_code == 200


@pytest.mark.asyncio
async def test_chat_errors(client, upstream) -> None:
    missing = await client.post("/llm/chat", json={"modelId": "missing", "message": "hi"})
    assert missing.status_code == 400
    assert missing.json()["error_code"] == "NOT_FOUND"

    model = (await client.post("/models", json={"name": "no-endpoint"})).json()
    no_endpoint = await client.post("/llm/chat", json={"modelId": model["id"], "message": "hi"})
    assert no_endpoint.status_code == 400

    busy = (await client.post("/models", json={"name": "busy", "endpoint": "http://llm.local/v1"})).json()
    upstream.queue_text("overloaded", status_code=503)
    failed = await client.post("/llm/chat", json={"modelId": busy["id"], "message": "hi"})
    assert failed.status_code == 503
    assert failed.json()["upstream_status"] == 503
    assert failed.json()["raw_text"] == "overloaded"


@pytest.mark.asyncio
async def test_evaluator_config_masks_key(client) -> None:
    assert (await client.get("/evaluator/config")).json() is None

    await _configure_grader(client)
    body = (await client.get("/evaluator/config")).json()
    assert body["endpoint"] == GRADER_ENDPOINT
    assert body["apiKeyConfigured"] is True
    assert "sk-test-123456" not in json.dumps(body)


@pytest.mark.asyncio
async def test_evaluator_config_read_only_in_production(settings, store, http_client) -> None:
    app = create_app(settings.model_copy(update={"environment": "production"}), store=store, http_client=http_client)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.put(
            "/evaluator/config",
            json={"endpoint": GRADER_ENDPOINT, "apiKey": "sk-test-123456", "model": "grader-1"},
        )
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_auto_evaluate_without_config(client) -> None:
    resp = await client.post("/evaluator/auto-evaluate", json={"questionContent": "q", "llmResponse": "r"})
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "CONFIGURATION_ERROR"


@pytest.mark.asyncio
async def test_auto_evaluate_invalid_score_is_500(client, upstream) -> None:
    await _configure_grader(client)
    await client.post("/evaluator/prompts", json={"name": "p", "prompt": "{question}{response}"})
    upstream.queue_completion('{"accuracy": 7, "completeness": 5, "logic": 5, "japanese": 5}')

    resp = await client.post("/evaluator/auto-evaluate", json={"questionContent": "q", "llmResponse": "r"})
    assert resp.status_code == 500
    assert resp.json()["error_code"] == "INVALID_SCORE"
    assert resp.json()["stage"] == "validate"


@pytest.mark.asyncio
async def test_evaluation_rejects_out_of_range_scores(client) -> None:
    resp = await client.post(
        "/evaluations",
        json={
            "questionId": "q",
            "modelId": "m",
            "response": "r",
            "scores": {"accuracy": 6, "completeness": 5, "logic": 5, "japanese": 5},
        },
    )
    assert resp.status_code == 400
    assert "accuracy" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_auto_evaluate_huge_integer_score_is_invalid_score(client, upstream) -> None:
    await _configure_grader(client)
    await client.post("/evaluator/prompts", json={"name": "p", "prompt": "{question}{response}"})
    completion = '{"accuracy": ' + "1" * 401 + ', "completeness": 5, "logic": 5, "japanese": 5}'
    upstream.queue_completion(completion)

    resp = await client.post("/evaluator/auto-evaluate", json={"questionContent": "q", "llmResponse": "r"})
    assert resp.status_code == 500
    assert resp.json()["error_code"] == "INVALID_SCORE"
    assert resp.json()["raw_text"] == completion


@pytest.mark.asyncio
async def test_raw_text_fields_are_stored_verbatim(client, upstream) -> None:
    model = (await client.post("/models", json={"name": "M1", "endpoint": "http://llm.local/v1/chat"})).json()
    upstream.queue_json({"choices": [{"message": {"content": "ok"}}]})
    chat = await client.post("/llm/chat", json={"modelId": model["id"], "message": "  line one\n"})
    assert chat.status_code == 200
    assert upstream.last_json()["messages"][-1]["content"] == "  line one\n"

    response_text = 'Hello, "World"\n'
    saved = await client.post(
        "/evaluations",
        json={
            "questionId": "q-1",
            "modelId": model["id"],
            "response": response_text,
            "scores": {"accuracy": 4, "completeness": 4, "logic": 4, "japanese": 4},
        },
    )
    assert saved.status_code == 201
    assert saved.json()["response"] == response_text
    assert (await client.get(f"/evaluations/{saved.json()['id']}")).json()["response"] == response_text

    exported = (await client.get("/evaluations/export")).content.decode("utf-8")
    assert '"Hello, ""World""\n"' in exported

    blank = await client.post(
        "/evaluations",
        json={
            "questionId": "q-1",
            "modelId": model["id"],
            "response": " \n\t",
            "scores": {"accuracy": 4, "completeness": 4, "logic": 4, "japanese": 4},
        },
    )
    assert blank.status_code == 400
    assert "response" in blank.json()["detail"]


@pytest.mark.asyncio
async def test_evaluation_records_environment_and_evaluator(client) -> None:
    environment = (
        await client.post(
            "/evaluation-environments",
            json={"name": "lab-gpu", "processingSpec": "A100 x1", "executionApp": "vLLM"},
        )
    ).json()
    evaluator = (await client.post("/evaluators", json={"name": "Tanaka", "organization": "QA"})).json()
    model = (await client.post("/models", json={"name": "M1"})).json()

    saved = await client.post(
        "/evaluations",
        json={
            "questionId": "q-1",
            "modelId": model["id"],
            "response": "r",
            "scores": {"accuracy": 4, "completeness": 4, "logic": 4, "japanese": 4},
            "environmentId": environment["id"],
            "evaluator": evaluator["name"],
        },
    )
    assert saved.status_code == 201
    assert saved.json()["environmentId"] == environment["id"]

    records = (await client.get("/evaluations/detailed")).json()
    assert records[0]["environment"]["name"] == "lab-gpu"
    assert records[0]["evaluator"] == "Tanaka"

    exported = (await client.get("/evaluations/export")).content.decode("utf-8")
    row = exported.strip().split("\n")[-1]
    assert "lab-gpu,A100 x1,vLLM,Tanaka" in row


@pytest.mark.asyncio
async def test_end_to_end_scenario(client, upstream) -> None:
    question = (await client.post("/questions", json={"title": "Q1", "content": "What is 2+2?"})).json()
    model = (await client.post("/models", json={"name": "M1", "endpoint": "http://llm.local/v1/chat"})).json()
    await _configure_grader(client)
    await client.post("/evaluator/prompts", json={"name": "default", "prompt": "Q: {question}\nA: {response}"})

    upstream.queue_json({"choices": [{"message": {"content": "4"}}]})
    chat = await client.post("/llm/chat", json={"modelId": model["id"], "message": question["content"]})
    assert chat.status_code == 200
    assert chat.json()["response"] == "4"
    assert chat.json()["modelName"] == "M1"

    upstream.queue_completion('{"accuracy":5,"completeness":5,"logic":5,"japanese":5}')
    graded = await client.post(
        "/evaluator/auto-evaluate",
        json={"questionContent": question["content"], "llmResponse": chat.json()["response"]},
    )
    assert graded.status_code == 200
    scores = graded.json()["scores"]
    assert scores == {"accuracy": 5, "completeness": 5, "logic": 5, "japanese": 5, "overall": 5.0}
    assert graded.json()["promptUsed"] == "default"

    saved = await client.post(
        "/evaluations",
        json={
            "questionId": question["id"],
            "modelId": model["id"],
            "response": chat.json()["response"],
            "scores": scores,
            "processingTime": chat.json()["processingTime"],
        },
    )
    assert saved.status_code == 201
    evaluation = saved.json()
    assert evaluation["evaluatedAt"]

    detailed = await client.get("/evaluations/detailed", params={"questionId": question["id"]})
    records = detailed.json()
    assert len(records) == 1
    assert records[0]["question"]["title"] == "Q1"
    assert records[0]["model"]["name"] == "M1"
    assert records[0]["environment"] is None

    assert (await client.get(f"/evaluations/{evaluation['id']}")).json()["id"] == evaluation["id"]

    exported = await client.get("/evaluations/export", params={"modelId": model["id"]})
    assert exported.status_code == 200
    assert exported.headers["content-type"].startswith("text/csv")
    assert "charset=utf-8" in exported.headers["content-type"]
    assert "attachment" in exported.headers["content-disposition"]
    assert "evaluation_results_" in exported.headers["content-disposition"]
    text = exported.content.decode("utf-8")
    assert text.startswith(BOM)
    assert len(text[len(BOM):].strip().split("\n")) == 2

    analytics = (await client.get("/analytics", params={"modelIds": [model["id"]]})).json()
    assert analytics["summary"]["totalEvaluations"] == 1
    assert analytics["modelStats"][0]["modelName"] == "M1"

    status = (await client.get("/storage/status")).json()
    assert status["backend"] == "memory"
    assert status["collections"]["evaluations"] == 1

    assert (await client.delete(f"/evaluations/{evaluation['id']}")).json() == {"success": True}
    assert (await client.get("/evaluations")).json() == []


@pytest.mark.asyncio
async def test_deleted_model_still_listed_in_detailed(client) -> None:
    model = (await client.post("/models", json={"name": "temp"})).json()
    await client.post(
        "/evaluations",
        json={
            "questionId": "q-x",
            "modelId": model["id"],
            "response": "r",
            "scores": {"accuracy": 3, "completeness": 3, "logic": 3, "japanese": 3},
        },
    )
    await client.delete(f"/models/{model['id']}")

    records = (await client.get("/evaluations/detailed")).json()
    assert len(records) == 1
    assert records[0]["model"] is None
    assert records[0]["question"] is None


@pytest.mark.asyncio
async def test_seed_default_prompt(repos, settings) -> None:
    assert await seed_default_prompt(repos, settings) is False

    seeding = settings.model_copy(update={"seed_default_prompt": True})
    assert await seed_default_prompt(repos, seeding) is True
    prompt = await repos.prompts.get_default()
    assert "{question}" in prompt.prompt
    assert "{response}" in prompt.prompt
    assert await seed_default_prompt(repos, seeding) is False
