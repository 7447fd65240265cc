"""FastAPI 애플리케이션 팩토리."""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import router as api_router
from .api.error_handlers import (
    app_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .repositories import Repositories, build_repositories
from .services.shared.errors import EvaluatorAppError
from .services.shared.prompts import DEFAULT_PROMPT_NAME, load_prompt
from .storage import CollectionStore, build_collection_store
from .utils.config import Settings, get_settings
from .utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PROMPT_TITLE = "標準評価プロンプト"

FASTAPI_DESCRIPTION = (
    "LLM 응답 평가 백엔드 API입니다. 모델/질문을 등록하고, 모델 응답을 받아 루브릭으로 채점하고, 결과를 집계합니다.\n\n"
    "핵심 개념:\n"
    "- **루브릭**: 정확성(accuracy), 완전성(completeness), 논리성(logic), 일본어 품질(japanese)을 1~5점으로 채점합니다. "
    "`overall`은 항상 서버가 네 항목 평균(소수 첫째 자리, 사사오입)으로 계산합니다.\n"
    "- **자동 평가**: 평가 프롬프트의 `{question}`, `{response}` 자리표시자를 채워 평가 모델을 호출하고 JSON 점수를 검증합니다.\n"
    "- **저장소**: `STORAGE_BACKEND`로 로컬 JSON 파일 또는 Upstash Redis REST를 선택합니다.\n\n"
    "주요 엔드포인트:\n"
    "- `/models`, `/questions`, `/evaluation-environments`, `/evaluators`, `/evaluator/prompts`: CRUD.\n"
    "- `/llm/chat` (POST): 등록 모델에 질문을 보내 답변을 받습니다.\n"
    "- `/evaluator/auto-evaluate` (POST): 평가 모델로 자동 채점합니다.\n"
    "- `/evaluations`, `/evaluations/detailed`, `/evaluations/export`: 평가 저장/조인 조회/CSV 내보내기.\n"
    "- `/analytics` (GET): 모델별/질문별 통계, 행렬, 분포, 월별 추이.\n\n"
    "오류 응답은 `status`, `error_code`, `detail`, `stage` 필드를 가진 공통 포맷입니다."
)

TAGS_METADATA = [
    {"name": "system", "description": "헬스 체크 및 저장소 상태"},
    {"name": "models", "description": "평가 대상 LLM 엔드포인트 등록"},
    {"name": "questions", "description": "평가 질문"},
    {"name": "environments", "description": "평가 실행 환경"},
    {"name": "evaluators", "description": "평가자(사람)"},
    {"name": "evaluator", "description": "채점 서비스 설정, 평가 프롬프트, 자동 평가"},
    {"name": "llm", "description": "등록 모델 호출"},
    {"name": "evaluations", "description": "평가 결과 저장/조회/내보내기"},
    {"name": "analytics", "description": "평가 집계"},
]


async def seed_default_prompt(repos: Repositories, settings: Settings) -> bool:
    """평가 프롬프트가 하나도 없으면 번들 기본 프롬프트를 등록한다.

    Returns:
        bool: 새로 등록했으면 True.
    """

    if not settings.seed_default_prompt:
        return False
    if await repos.prompts.count() > 0:
        return False
    template = load_prompt(DEFAULT_PROMPT_NAME, settings.default_prompt_version, settings.prompt_root)
    prompt = await repos.prompts.create(
        {
            "name": DEFAULT_PROMPT_TITLE,
            "prompt": template,
            "description": f"{DEFAULT_PROMPT_NAME}@{settings.default_prompt_version}",
        }
    )
    logger.info("seed_default_prompt:등록 id=%s version=%s", prompt.id, settings.default_prompt_version)
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """기본 프롬프트를 준비하고, 종료 시 공용 클라이언트를 닫는다."""

    try:
        await seed_default_prompt(app.state.repositories, app.state.settings)
    except (EvaluatorAppError, OSError) as exc:
        logger.error("lifespan:기본 프롬프트 등록 실패 err=%s", exc)
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        await app.state.repositories.store.aclose()


def create_app(
    settings: Settings | None = None,
    store: CollectionStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """FastAPI 애플리케이션을 구성해 반환한다.

    Args:
        settings: 외부에서 주입할 `Settings` 인스턴스. 생략 시 `.env`/환경변수를 읽어 생성한다.
        store: 컬렉션 저장소. 생략 시 설정의 `storage_backend`에 따라 만든다.
        http_client: 업스트림 LLM 호출용 클라이언트(테스트에서 MockTransport 주입).

    Returns:
        FastAPI: 라우터와 미들웨어가 등록된 FastAPI 인스턴스.
    """

    settings = settings or get_settings()
    servers = [{"url": settings.callback_base_url}] if settings.callback_base_url else None
    app = FastAPI(
        title=(settings.fastapi_title or "").strip('"'),
        version=settings.fastapi_version,
        description=FASTAPI_DESCRIPTION,
        openapi_tags=TAGS_METADATA,
        servers=servers,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(EvaluatorAppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)
    app.state.settings = settings
    app.state.repositories = build_repositories(store or build_collection_store(settings), settings)
    app.state.http_client = http_client or httpx.AsyncClient(timeout=settings.llm_http_timeout)
    logger.info(
        "create_app:완료 environment=%s storage=%s",
        settings.environment,
        app.state.repositories.store.backend_name,
    )
    return app


app = create_app()
