"""채점 서비스 설정과 자동 평가 라우트."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends

from llm_evaluator.api.deps import get_http_client, get_repositories, get_settings
from llm_evaluator.api.schemas import (
    AutoEvaluateRequest,
    AutoEvaluateResponse,
    ErrorResponse,
    EvaluatorConfigUpdate,
    EvaluatorConfigView,
)
from llm_evaluator.repositories import Repositories
from llm_evaluator.services.grading import auto_evaluate
from llm_evaluator.services.shared.errors import ForbiddenError
from llm_evaluator.utils.config import Settings
from llm_evaluator.utils.logger import get_logger

router = APIRouter(prefix="/evaluator", tags=["evaluator"])
logger = get_logger(__name__)


@router.get("/config", response_model=EvaluatorConfigView | None, summary="채점 서비스 설정 조회")
async def get_evaluator_config(repos: Repositories = Depends(get_repositories)):
    """저장된 설정(또는 환경변수 키로 구성한 기본 설정)을 API 키를 가린 채 반환한다.

    설정이 전혀 없으면 `null`.
    """

    config = await repos.evaluator_config.get()
    if config is None:
        logger.debug("get_evaluator_config:설정 없음")
        return None
    return EvaluatorConfigView.from_config(config)


@router.put(
    "/config",
    response_model=EvaluatorConfigView,
    responses={403: {"model": ErrorResponse, "description": "운영 환경에서는 환경변수로만 설정"}},
    summary="채점 서비스 설정 저장",
)
async def update_evaluator_config(
    payload: EvaluatorConfigUpdate,
    repos: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
):
    if settings.is_production:
        raise ForbiddenError("evaluator config is read-only in production; set OPENAI_API_KEY instead", stage="config")
    config = await repos.evaluator_config.update(payload.model_dump())
    return EvaluatorConfigView.from_config(config)


@router.post(
    "/auto-evaluate",
    response_model=AutoEvaluateResponse,
    responses={
        400: {"model": ErrorResponse, "description": "입력 누락, 설정 누락, 프롬프트 없음"},
        500: {"model": ErrorResponse, "description": "평가 응답 해석/점수 검증 실패"},
        502: {"model": ErrorResponse, "description": "평가 서비스 실패 (업스트림 상태가 있으면 그 상태)"},
    },
    summary="평가 모델로 자동 채점",
)
async def auto_evaluate_response(
    payload: AutoEvaluateRequest,
    repos: Repositories = Depends(get_repositories),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """질문과 답변을 평가 프롬프트에 채워 넣고 평가 모델의 JSON 점수를 검증해 반환한다.

    `scores.overall`은 평가 모델이 준 값이 아니라 네 항목 평균(소수 첫째 자리)이다.
    """

    result = await auto_evaluate(
        payload.question_content,
        payload.llm_response,
        payload.prompt_id,
        prompts=repos.prompts,
        config_repo=repos.evaluator_config,
        http_client=http_client,
    )
    return AutoEvaluateResponse(scores=result.scores, comments=result.comments, prompt_used=result.prompt_used)


__all__ = ["router"]
