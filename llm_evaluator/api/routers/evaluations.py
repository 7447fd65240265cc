"""평가 저장/조회, 조인 조회, CSV 내보내기, 분석 라우트."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from llm_evaluator.api.deps import get_repositories
from llm_evaluator.api.schemas import DeleteResponse, ErrorResponse, EvaluationCreate
from llm_evaluator.models import DetailedEvaluation, Evaluation
from llm_evaluator.repositories import Repositories
from llm_evaluator.services.analytics import build_analytics, load_detailed_evaluations
from llm_evaluator.services.export import build_evaluations_csv, export_filename
from llm_evaluator.services.shared.errors import NotFoundError
from llm_evaluator.utils.logger import get_logger

router = APIRouter(tags=["evaluations"])
logger = get_logger(__name__)

NOT_FOUND_RESPONSE: dict[int | str, dict[str, Any]] = {404: {"model": ErrorResponse, "description": "평가 없음"}}


@router.get("/evaluations", response_model=list[Evaluation], summary="평가 목록 (최신순)")
async def list_evaluations(
    question_id: str | None = Query(None, alias="questionId"),
    model_id: str | None = Query(None, alias="modelId"),
    repos: Repositories = Depends(get_repositories),
):
    return await repos.evaluations.list_filtered(question_id=question_id, model_id=model_id)


@router.post(
    "/evaluations",
    response_model=Evaluation,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "필수 필드 누락 또는 점수 범위 밖"}},
    summary="평가 저장",
)
async def create_evaluation(payload: EvaluationCreate, repos: Repositories = Depends(get_repositories)):
    """평가 한 건을 저장한다. `evaluatedAt`과 `scores.overall`은 서버가 정한다.

    질문/모델 id의 존재 여부는 확인하지 않는다(참조 무결성 없음).
    """

    evaluation = await repos.evaluations.create(payload.model_dump())
    logger.info(
        "create_evaluation:성공 id=%s question_id=%s model_id=%s overall=%s",
        evaluation.id,
        evaluation.question_id,
        evaluation.model_id,
        evaluation.scores.overall,
    )
    return evaluation


@router.get(
    "/evaluations/detailed",
    response_model=list[DetailedEvaluation],
    summary="질문/모델/환경을 조인한 평가 목록",
)
async def list_detailed_evaluations(
    question_id: str | None = Query(None, alias="questionId"),
    model_id: str | None = Query(None, alias="modelId"),
    repos: Repositories = Depends(get_repositories),
):
    """참조 대상이 삭제된 평가는 해당 필드가 `null`로 남는다."""

    return await load_detailed_evaluations(repos, question_id=question_id, model_id=model_id)


@router.get(
    "/evaluations/export",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/csv": {}}, "description": "BOM 포함 UTF-8 CSV"}},
    summary="평가 결과 CSV 내보내기",
)
async def export_evaluations(
    question_id: str | None = Query(None, alias="questionId"),
    model_id: str | None = Query(None, alias="modelId"),
    repos: Repositories = Depends(get_repositories),
):
    rows = await load_detailed_evaluations(repos, question_id=question_id, model_id=model_id)
    content = build_evaluations_csv(rows)
    filename = export_filename()
    logger.info("export_evaluations:성공 rows=%d filename=%s", len(rows), filename)
    return StreamingResponse(
        iter([content.encode("utf-8")]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/evaluations/{evaluation_id}", response_model=Evaluation, responses=NOT_FOUND_RESPONSE, summary="평가 단건 조회")
async def get_evaluation(evaluation_id: str, repos: Repositories = Depends(get_repositories)):
    evaluation = await repos.evaluations.get_by_id(evaluation_id)
    if evaluation is None:
        raise NotFoundError(f"evaluation not found: {evaluation_id}", stage="lookup")
    return evaluation


@router.delete("/evaluations/{evaluation_id}", response_model=DeleteResponse, responses=NOT_FOUND_RESPONSE, summary="평가 삭제")
async def delete_evaluation(evaluation_id: str, repos: Repositories = Depends(get_repositories)):
    if not await repos.evaluations.delete(evaluation_id):
        raise NotFoundError(f"evaluation not found: {evaluation_id}", stage="lookup")
    return DeleteResponse()


@router.get("/analytics", tags=["analytics"], summary="평가 집계")
async def get_analytics(
    model_ids: list[str] | None = Query(None, alias="modelIds"),
    question_ids: list[str] | None = Query(None, alias="questionIds"),
    repos: Repositories = Depends(get_repositories),
) -> dict[str, Any]:
    """요약, 모델별/질문별 통계, 모델×질문 행렬, 총점 분포, 월별 추이를 한 번에 계산한다.

    `modelIds`/`questionIds`는 반복 지정할 수 있고, 비어 있으면 필터를 적용하지 않는다.
    """

    rows = await load_detailed_evaluations(repos)
    return build_analytics(rows, model_ids=model_ids, question_ids=question_ids)


__all__ = ["router"]
