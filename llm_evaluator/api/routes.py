"""API 라우터와 시스템 엔드포인트 정의."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from llm_evaluator.api.deps import get_repositories
from llm_evaluator.api.routers import (
    environments_router,
    evaluations_router,
    evaluator_router,
    evaluators_router,
    llm_router,
    models_router,
    prompts_router,
    questions_router,
)
from llm_evaluator.api.schemas import HealthResponse, StorageStatusResponse
from llm_evaluator.repositories import Repositories
from llm_evaluator.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

STATUS_COLLECTIONS = (
    "models",
    "questions",
    "evaluation-environments",
    "evaluators",
    "evaluation-prompts",
    "evaluations",
)


@router.get("/health", response_model=HealthResponse, tags=["system"])
async def health():
    """서비스 가용성을 확인하는 헬스 체크.

    - 저장소/업스트림을 건드리지 않는 가장 단순한 경로.
    - 응답은 `{"status": "ok"}` 형태의 JSON 한 건이다.
    """

    logger.debug("health:시작")
    return HealthResponse(status="ok")


@router.get("/storage/status", response_model=StorageStatusResponse, tags=["system"])
async def storage_status(repos: Repositories = Depends(get_repositories)):
    """사용 중인 저장소 백엔드와 컬렉션별 레코드 수. 자격 증명은 노출하지 않는다."""

    collections = {}
    for key in STATUS_COLLECTIONS:
        collections[key] = len(await repos.store.get(key))
    logger.info("storage_status:성공 backend=%s collections=%s", repos.store.backend_name, collections)
    return StorageStatusResponse(backend=repos.store.backend_name, collections=collections)


# evaluator/prompts 는 evaluator 라우터보다 먼저 등록한다
router.include_router(prompts_router)
router.include_router(evaluator_router)
router.include_router(models_router)
router.include_router(questions_router)
router.include_router(environments_router)
router.include_router(evaluators_router)
router.include_router(llm_router)
router.include_router(evaluations_router)
