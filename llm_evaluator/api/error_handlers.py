"""표준 에러 응답 핸들러."""

from __future__ import annotations

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from llm_evaluator.api.schemas import ErrorCode, ErrorResponse
from llm_evaluator.services.shared.errors import EvaluatorAppError
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)


def _resolve_error_code(status_code: int, detail: str) -> ErrorCode:
    """HTTP 상태와 메시지를 기반으로 에러 코드를 결정한다."""

    normalized = detail.lower()
    if status_code == 403:
        return ErrorCode.FORBIDDEN
    if status_code == 404:
        return ErrorCode.NOT_FOUND
    if status_code in (502, 503, 504):
        if status_code == 504 or "timeout" in normalized or "timed out" in normalized:
            return ErrorCode.UPSTREAM_TIMEOUT
        return ErrorCode.UPSTREAM_ERROR
    if status_code in (400, 405, 422):
        return ErrorCode.VALIDATION_ERROR
    return ErrorCode.UNKNOWN_ERROR


def _describe_validation_errors(exc: RequestValidationError) -> str:
    """`body.scores.accuracy: ...` 형식으로 어떤 필드가 잘못됐는지 알려준다."""

    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{loc}: {error.get('msg', 'invalid')}" if loc else str(error.get("msg", "invalid")))
    return "; ".join(parts) or "요청 검증 실패"


def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """HTTPException을 표준 응답으로 변환한다."""

    detail = str(exc.detail)
    error_code = _resolve_error_code(exc.status_code, detail)
    payload = ErrorResponse(
        status="error",
        error_code=error_code,
        detail=detail,
    )
    logger.warning("http_exception_handler:응답 status=%s error_code=%s detail=%s", exc.status_code, error_code, detail)
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump(mode="json"))


def app_error_handler(_: Request, exc: EvaluatorAppError) -> JSONResponse:
    """도메인 예외를 상태/단계/업스트림 정보를 담은 표준 응답으로 변환한다."""

    payload = ErrorResponse(
        status="error",
        error_code=exc.error_code,
        detail=exc.detail,
        stage=exc.stage,
        upstream_status=exc.upstream_status,
        raw_text=exc.raw_text,
    )
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app_error_handler:응답 status=%s error_code=%s stage=%s detail=%s",
        exc.status_code,
        exc.error_code.value,
        exc.stage,
        exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump(mode="json"))


def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 오류를 400 표준 응답으로 변환한다."""

    detail = _describe_validation_errors(exc)
    payload = ErrorResponse(
        status="error",
        error_code=ErrorCode.VALIDATION_ERROR,
        detail=detail,
        stage="input",
    )
    logger.warning("validation_exception_handler:응답 detail=%s", detail)
    return JSONResponse(status_code=400, content=payload.model_dump(mode="json"))


def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """미처리 예외를 표준 응답으로 변환한다."""

    detail = "알 수 없는 오류"
    payload = ErrorResponse(
        status="error",
        error_code=ErrorCode.UNKNOWN_ERROR,
        detail=detail,
    )
    logger.error("unhandled_exception_handler:응답 err=%s", exc, exc_info=exc)
    return JSONResponse(status_code=500, content=payload.model_dump(mode="json"))


__all__ = [
    "app_error_handler",
    "http_exception_handler",
    "unhandled_exception_handler",
    "validation_exception_handler",
]
