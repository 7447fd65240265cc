"""도메인 예외 계층.

각 예외는 HTTP 상태, 표준 에러 코드, 실패 단계(stage)를 함께 들고 다니며
`llm_evaluator.api.error_handlers`가 이를 `ErrorResponse`로 변환한다.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """표준 에러 코드."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    PARSE_FAILED = "PARSE_FAILED"
    INVALID_SCORE = "INVALID_SCORE"
    STORAGE_ERROR = "STORAGE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class EvaluatorAppError(Exception):
    """애플리케이션 도메인 예외의 공통 부모."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        detail: str,
        *,
        stage: str | None = None,
        upstream_status: int | None = None,
        raw_text: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.stage = stage
        self.upstream_status = upstream_status
        self.raw_text = raw_text
        if status_code is not None:
            self.status_code = status_code


class InputValidationError(EvaluatorAppError):
    """필수 필드 누락/공백."""

    status_code = 400
    error_code = ErrorCode.VALIDATION_ERROR


class NotFoundError(EvaluatorAppError):
    """경로로 지정한 id가 존재하지 않는다."""

    status_code = 404
    error_code = ErrorCode.NOT_FOUND


class ReferenceNotFoundError(NotFoundError):
    """요청 본문이 참조한 id가 존재하지 않는다(잘못된 요청으로 취급)."""

    status_code = 400


class ForbiddenError(EvaluatorAppError):
    status_code = 403
    error_code = ErrorCode.FORBIDDEN


class ConfigurationError(EvaluatorAppError):
    """평가 서비스 설정 누락. 재시도가 아니라 설정 수정이 필요하다."""

    status_code = 400
    error_code = ErrorCode.CONFIGURATION_ERROR


class UpstreamError(EvaluatorAppError):
    """LLM 엔드포인트가 성공이 아닌 상태를 돌려주었거나 연결에 실패했다."""

    status_code = 502
    error_code = ErrorCode.UPSTREAM_ERROR


class UpstreamTimeoutError(UpstreamError):
    status_code = 504
    error_code = ErrorCode.UPSTREAM_TIMEOUT


class ParseError(EvaluatorAppError):
    """평가 모델 응답을 구조화 데이터로 해석하지 못했다."""

    status_code = 500
    error_code = ErrorCode.PARSE_FAILED


class InvalidScoreError(EvaluatorAppError):
    """평가 점수가 누락되었거나 숫자가 아니거나 1~5 범위를 벗어났다."""

    status_code = 500
    error_code = ErrorCode.INVALID_SCORE


class StorageError(EvaluatorAppError):
    """컬렉션 저장소 쓰기 실패."""

    status_code = 500
    error_code = ErrorCode.STORAGE_ERROR


__all__ = [
    "ErrorCode",
    "EvaluatorAppError",
    "InputValidationError",
    "NotFoundError",
    "ReferenceNotFoundError",
    "ForbiddenError",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "ParseError",
    "InvalidScoreError",
    "StorageError",
]
