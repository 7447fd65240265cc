"""등록 모델 호출 라우트."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends

from llm_evaluator.api.deps import get_http_client, get_repositories
from llm_evaluator.api.schemas import ChatRequest, ChatResponse, ErrorResponse
from llm_evaluator.repositories import Repositories
from llm_evaluator.services.llm_chat import fetch_llm_response

router = APIRouter(prefix="/llm", tags=["llm"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "모델 없음 또는 엔드포인트 미설정"},
        502: {"model": ErrorResponse, "description": "업스트림 실패 (업스트림 상태가 있으면 그 상태)"},
    },
    summary="등록된 모델에 질문 전송",
)
async def chat(
    payload: ChatRequest,
    repos: Repositories = Depends(get_repositories),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """모델 엔드포인트에 한 번 요청해 답변 텍스트를 돌려준다. 결과는 저장하지 않는다."""

    result = await fetch_llm_response(repos.models, http_client, payload.model_id, payload.message)
    return ChatResponse(
        response=result.response,
        model_name=result.model_name,
        processing_time=result.processing_time,
    )


__all__ = ["router"]
