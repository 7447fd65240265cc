from __future__ import annotations

import asyncio

import pytest

from llm_evaluator.repositories import EvaluatorConfigRepository
from llm_evaluator.repositories.evaluator_config import CONFIG_KEY
from llm_evaluator.services.shared.errors import InputValidationError
from llm_evaluator.storage import InMemoryCollectionStore


@pytest.mark.asyncio
async def test_create_prepends_and_assigns_identity(repos) -> None:
    first = await repos.questions.create({"title": "Q1", "content": "What is 2+2?"})
    await asyncio.sleep(0.002)
    second = await repos.questions.create({"title": "Q2", "content": "Capital of Japan?", "id": "forged"})

    listed = await repos.questions.get_all()
    assert [q.id for q in listed] == [second.id, first.id]
    assert second.id != "forged"
    assert first.id != second.id
    assert first.created_at is not None


@pytest.mark.asyncio
async def test_records_are_stored_camel_case(repos, store) -> None:
    await repos.environments.create({"name": "GPU", "processing_spec": "A100", "execution_app": "vLLM"})
    raw = await store.get("evaluation-environments")
    assert raw[0]["processingSpec"] == "A100"
    assert raw[0]["executionApp"] == "vLLM"
    assert "createdAt" in raw[0]


@pytest.mark.asyncio
async def test_update_merges_and_keeps_identity(repos) -> None:
    model = await repos.models.create({"name": "llama", "endpoint": "http://localhost/v1", "size": "7B"})

    updated = await repos.models.update(
        model.id,
        {"size": "13B", "id": "other", "createdAt": "2000-01-01T00:00:00Z"},
    )

    assert updated is not None
    assert updated.id == model.id
    assert updated.created_at == model.created_at
    assert updated.size == "13B"
    assert updated.endpoint == "http://localhost/v1"
    assert (await repos.models.get_by_id(model.id)).size == "13B"


@pytest.mark.asyncio
async def test_update_unknown_id_returns_none(repos) -> None:
    assert await repos.models.update("missing", {"name": "x"}) is None


@pytest.mark.asyncio
async def test_update_rejects_blanking_required_field(repos) -> None:
    model = await repos.models.create({"name": "llama"})
    with pytest.raises(InputValidationError):
        await repos.models.update(model.id, {"name": ""})


@pytest.mark.asyncio
async def test_create_without_required_field_raises(repos) -> None:
    with pytest.raises(InputValidationError):
        await repos.questions.create({"title": "only title"})


@pytest.mark.asyncio
async def test_delete_removes_exactly_one(repos) -> None:
    kept = await repos.evaluators.create({"name": "Alice"})
    removed = await repos.evaluators.create({"name": "Bob"})

    assert await repos.evaluators.delete(removed.id) is True
    assert await repos.evaluators.count() == 1
    assert (await repos.evaluators.get_all())[0].id == kept.id
    assert await repos.evaluators.delete(removed.id) is False
    assert await repos.evaluators.count() == 1


@pytest.mark.asyncio
async def test_malformed_records_are_skipped() -> None:
    from llm_evaluator.repositories import QuestionRepository

    store = InMemoryCollectionStore(
        {
            "questions": [
                {"id": "ok", "title": "T", "content": "C", "createdAt": "2024-05-01T00:00:00Z"},
                {"id": "broken"},
                "not a record",
            ]
        }
    )
    questions = await QuestionRepository(store).get_all()
    assert [q.id for q in questions] == ["ok"]


@pytest.mark.asyncio
async def test_evaluation_filters_combine_with_and(repos) -> None:
    scores = {"accuracy": 4, "completeness": 4, "logic": 4, "japanese": 4}
    await repos.evaluations.create({"question_id": "q1", "model_id": "m1", "response": "a", "scores": scores})
    await repos.evaluations.create({"question_id": "q1", "model_id": "m2", "response": "b", "scores": scores})
    await repos.evaluations.create({"question_id": "q2", "model_id": "m1", "response": "c", "scores": scores})

    assert len(await repos.evaluations.list_filtered(question_id="q1")) == 2
    assert len(await repos.evaluations.list_filtered(model_id="m1")) == 2
    both = await repos.evaluations.list_filtered(question_id="q1", model_id="m1")
    assert [e.response for e in both] == ["a"]


@pytest.mark.asyncio
async def test_evaluation_overall_is_derived(repos) -> None:
    evaluation = await repos.evaluations.create(
        {
            "question_id": "q1",
            "model_id": "m1",
            "response": "4",
            "scores": {"accuracy": 5, "completeness": 4, "logic": 4, "japanese": 5, "overall": 1},
        }
    )
    assert evaluation.scores.overall == 4.5
    assert evaluation.evaluated_at is not None


@pytest.mark.asyncio
async def test_default_prompt_is_most_recent(repos) -> None:
    assert await repos.prompts.get_default() is None
    await repos.prompts.create({"name": "old", "prompt": "{question}"})
    await asyncio.sleep(0.002)
    newest = await repos.prompts.create({"name": "new", "prompt": "{response}"})
    assert (await repos.prompts.get_default()).id == newest.id


@pytest.mark.asyncio
async def test_evaluator_config_env_fallback_is_not_persisted(store, settings) -> None:
    env_settings = settings.model_copy(update={"openai_api_key": "sk-env-key"})
    repo = EvaluatorConfigRepository(store, env_settings)

    synthesized = await repo.get()
    assert synthesized is not None
    assert synthesized.api_key == "sk-env-key"
    assert synthesized.endpoint == env_settings.grader_endpoint

    await repo.update({"endpoint": "https://grader.example.com/v1/chat", "model": "grader-1"})
    stored = await store.read(CONFIG_KEY)
    assert stored["endpoint"] == "https://grader.example.com/v1/chat"
    assert not stored.get("apiKey")

    current = await repo.get()
    assert current.api_key == "sk-env-key"
    assert current.model == "grader-1"


@pytest.mark.asyncio
async def test_evaluator_config_missing_without_env_key(store, settings) -> None:
    assert await EvaluatorConfigRepository(store, settings).get() is None
