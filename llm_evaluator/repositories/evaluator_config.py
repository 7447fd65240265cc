"""채점 서비스 설정 문서 리포지토리."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from llm_evaluator.models import EvaluatorConfig
from llm_evaluator.services.shared.errors import StorageError
from llm_evaluator.storage import CollectionStore
from llm_evaluator.utils.config import Settings
from llm_evaluator.utils.logger import get_logger

from .base import utc_now

logger = get_logger(__name__)

CONFIG_KEY = "evaluator-config"


class EvaluatorConfigRepository:
    """`evaluator-config` 키에 단일 설정 문서를 보관한다.

    저장된 API 키가 비어 있으면 `OPENAI_API_KEY`를 대신 사용한다. 저장된 설정이
    아예 없어도 환경변수 키가 있으면 기본 엔드포인트/모델로 설정을 구성한다.
    환경변수 키는 저장소에 기록하지 않는다.
    """

    def __init__(self, store: CollectionStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    async def _load_stored(self) -> EvaluatorConfig | None:
        try:
            raw = await self.store.read(CONFIG_KEY)
        except Exception as exc:
            logger.error("EvaluatorConfigRepository:읽기 실패 err=%s", exc)
            return None
        if not isinstance(raw, dict):
            return None
        try:
            return EvaluatorConfig.model_validate(raw)
        except ValidationError as exc:
            logger.warning("EvaluatorConfigRepository:손상된 설정 errors=%d", exc.error_count())
            return None

    async def get(self) -> EvaluatorConfig | None:
        """환경변수 폴백을 적용한 현재 설정."""

        config = await self._load_stored()
        env_key = self.settings.openai_api_key
        if config is None:
            if not env_key:
                return None
            logger.debug("EvaluatorConfigRepository:환경변수 기반 기본 설정 사용")
            return EvaluatorConfig(
                endpoint=self.settings.grader_endpoint,
                model=self.settings.grader_model,
                api_key=env_key,
            )
        if not config.api_key and env_key:
            config = config.model_copy(update={"api_key": env_key})
        return config

    async def update(self, changes: dict[str, Any]) -> EvaluatorConfig:
        existing = await self._load_stored()
        base = existing.model_dump() if existing else {"created_at": utc_now()}
        patch = {key: value for key, value in changes.items() if key not in {"id", "created_at"}}
        config = EvaluatorConfig.model_validate({**base, **patch})
        if config.created_at is None:
            config.created_at = utc_now()
        try:
            await self.store.write(CONFIG_KEY, config.to_record())
        except StorageError:
            raise
        except Exception as exc:
            logger.error("EvaluatorConfigRepository:쓰기 실패 err=%s", exc)
            raise StorageError(f"failed to write evaluator config: {exc}", stage="storage") from exc
        logger.info("EvaluatorConfigRepository:update 성공 endpoint=%s model=%s", config.endpoint, config.model)
        return config


__all__ = ["CONFIG_KEY", "EvaluatorConfigRepository"]
