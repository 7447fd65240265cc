"""단순 CRUD 엔티티(모델/질문/평가 환경/평가자/평가 프롬프트) 라우터.

다섯 엔티티의 경로 모양이 같아서 `build_catalog_router`로 한 번에 만든다.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from llm_evaluator.api.deps import get_repositories
from llm_evaluator.api.schemas import (
    DeleteResponse,
    EnvironmentCreate,
    EnvironmentUpdate,
    ErrorResponse,
    EvaluatorCreate,
    EvaluatorUpdate,
    LLMModelCreate,
    LLMModelUpdate,
    PromptCreate,
    PromptUpdate,
    QuestionCreate,
    QuestionUpdate,
)
from llm_evaluator.models import EvaluationEnvironment, EvaluationPrompt, Evaluator, LLMModel, Question
from llm_evaluator.repositories import CollectionRepository, Repositories
from llm_evaluator.services.shared.errors import NotFoundError
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "필수 필드 누락/공백"},
    404: {"model": ErrorResponse, "description": "대상 id 없음"},
}


def build_catalog_router(
    *,
    prefix: str,
    tag: str,
    repo_name: str,
    record_model: type[BaseModel],
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    label: str,
) -> APIRouter:
    """`GET/POST {prefix}`와 `GET/PUT/DELETE {prefix}/{id}`를 제공하는 라우터를 만든다.

    Args:
        repo_name: `Repositories`에서 꺼낼 리포지토리 속성 이름.
        label: 로그와 404 메시지에 쓰이는 엔티티 이름.
    """

    router = APIRouter(prefix=prefix, tags=[tag], responses=ERROR_RESPONSES)

    def _repo(repos: Repositories) -> CollectionRepository:
        return getattr(repos, repo_name)

    async def _require(repo: CollectionRepository, record_id: str):
        record = await repo.get_by_id(record_id)
        if record is None:
            raise NotFoundError(f"{label} not found: {record_id}", stage="lookup")
        return record

    @router.get("", response_model=list[record_model], summary=f"{label} 목록 (최신순)")
    async def list_records(repos: Repositories = Depends(get_repositories)):
        records = await _repo(repos).get_all()
        logger.debug("list_%s:성공 count=%d", label, len(records))
        return records

    @router.post(
        "",
        response_model=record_model,
        status_code=status.HTTP_201_CREATED,
        summary=f"{label} 생성",
    )
    async def create_record(payload: create_schema, repos: Repositories = Depends(get_repositories)):
        return await _repo(repos).create(payload.model_dump())

    @router.get("/{record_id}", response_model=record_model, summary=f"{label} 단건 조회")
    async def get_record(record_id: str, repos: Repositories = Depends(get_repositories)):
        return await _require(_repo(repos), record_id)

    @router.put("/{record_id}", response_model=record_model, summary=f"{label} 수정 (보낸 필드만 반영)")
    async def update_record(record_id: str, payload: update_schema, repos: Repositories = Depends(get_repositories)):
        record = await _repo(repos).update(record_id, payload.model_dump(exclude_unset=True))
        if record is None:
            raise NotFoundError(f"{label} not found: {record_id}", stage="lookup")
        return record

    @router.delete("/{record_id}", response_model=DeleteResponse, summary=f"{label} 삭제")
    async def delete_record(record_id: str, repos: Repositories = Depends(get_repositories)):
        if not await _repo(repos).delete(record_id):
            raise NotFoundError(f"{label} not found: {record_id}", stage="lookup")
        return DeleteResponse()

    return router


models_router = build_catalog_router(
    prefix="/models",
    tag="models",
    repo_name="models",
    record_model=LLMModel,
    create_schema=LLMModelCreate,
    update_schema=LLMModelUpdate,
    label="model",
)
questions_router = build_catalog_router(
    prefix="/questions",
    tag="questions",
    repo_name="questions",
    record_model=Question,
    create_schema=QuestionCreate,
    update_schema=QuestionUpdate,
    label="question",
)
environments_router = build_catalog_router(
    prefix="/evaluation-environments",
    tag="environments",
    repo_name="environments",
    record_model=EvaluationEnvironment,
    create_schema=EnvironmentCreate,
    update_schema=EnvironmentUpdate,
    label="environment",
)
evaluators_router = build_catalog_router(
    prefix="/evaluators",
    tag="evaluators",
    repo_name="evaluators",
    record_model=Evaluator,
    create_schema=EvaluatorCreate,
    update_schema=EvaluatorUpdate,
    label="evaluator",
)
prompts_router = build_catalog_router(
    prefix="/evaluator/prompts",
    tag="evaluator",
    repo_name="prompts",
    record_model=EvaluationPrompt,
    create_schema=PromptCreate,
    update_schema=PromptUpdate,
    label="prompt",
)

__all__ = [
    "build_catalog_router",
    "environments_router",
    "evaluators_router",
    "models_router",
    "prompts_router",
    "questions_router",
]
