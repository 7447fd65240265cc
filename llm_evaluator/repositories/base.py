"""컬렉션 저장소 위의 공통 CRUD 리포지토리.

모든 변경은 컬렉션 전체를 읽고(read), 한 요소를 고치고(modify),
전체를 다시 쓰는(write) 방식이다. 새 레코드는 맨 앞에 추가되므로
`get_all()`은 최신순이다.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from llm_evaluator.models import CamelModel
from llm_evaluator.services.shared.errors import InputValidationError
from llm_evaluator.storage import CollectionStore
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=CamelModel)


def generate_id() -> str:
    """밀리초 타임스탬프 + 무작위 접미사로 충돌하기 어려운 id를 만든다."""

    return f"{int(time.time() * 1000)}{secrets.token_hex(4)}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CollectionRepository(Generic[T]):
    """하위 클래스에서 `model`과 `collection_key`를 지정해 사용한다."""

    model: type[T]
    collection_key: str
    timestamp_field: str = "created_at"

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    @property
    def _immutable_keys(self) -> set[str]:
        keys = {"id", self.timestamp_field}
        keys.update(self._alias(name) for name in ("id", self.timestamp_field))
        return keys

    def _alias(self, name: str) -> str:
        field = self.model.model_fields.get(name)
        if field is None or not field.alias:
            return name
        return field.alias

    def _to_record_keys(self, fields: dict[str, Any]) -> dict[str, Any]:
        return {self._alias(key): value for key, value in fields.items()}

    async def _load_raw(self) -> list[dict[str, Any]]:
        return [item for item in await self.store.get(self.collection_key) if isinstance(item, dict)]

    def _parse(self, raw: dict[str, Any]) -> T | None:
        try:
            return self.model.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "%s:손상된 레코드 건너뜀 key=%s id=%s errors=%d",
                type(self).__name__,
                self.collection_key,
                raw.get("id"),
                exc.error_count(),
            )
            return None

    def _validate(self, values: dict[str, Any]) -> T:
        try:
            return self.model.model_validate(values)
        except ValidationError as exc:
            fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
            raise InputValidationError(f"invalid {self.model.__name__} fields: {fields}", stage="input") from exc

    async def get_all(self) -> list[T]:
        """저장된 모든 레코드를 최신순으로 반환한다."""

        records = [self._parse(raw) for raw in await self._load_raw()]
        return [record for record in records if record is not None]

    async def get_by_id(self, record_id: str) -> T | None:
        for raw in await self._load_raw():
            if raw.get("id") == record_id:
                return self._parse(raw)
        return None

    async def create(self, fields: dict[str, Any]) -> T:
        """id와 생성 시각을 부여해 새 레코드를 맨 앞에 저장한다."""

        values = {key: value for key, value in fields.items() if key not in self._immutable_keys}
        record = self._validate({**values, "id": generate_id(), self.timestamp_field: utc_now()})
        raw_records = await self._load_raw()
        raw_records.insert(0, record.to_record())
        await self.store.set(self.collection_key, raw_records)
        logger.info("%s:create 성공 id=%s", type(self).__name__, record.id)
        return record

    async def update(self, record_id: str, changes: dict[str, Any]) -> T | None:
        """전달된 필드만 덮어쓴다(얕은 병합). id와 생성 시각은 바뀌지 않는다."""

        raw_records = await self._load_raw()
        index = next((i for i, raw in enumerate(raw_records) if raw.get("id") == record_id), None)
        if index is None:
            logger.debug("%s:update 대상 없음 id=%s", type(self).__name__, record_id)
            return None

        patch = {
            key: value
            for key, value in self._to_record_keys(changes).items()
            if key not in self._immutable_keys
        }
        record = self._validate({**raw_records[index], **patch})
        raw_records[index] = record.to_record()
        await self.store.set(self.collection_key, raw_records)
        logger.info("%s:update 성공 id=%s fields=%s", type(self).__name__, record_id, sorted(patch))
        return record

    async def delete(self, record_id: str) -> bool:
        raw_records = await self._load_raw()
        index = next((i for i, raw in enumerate(raw_records) if raw.get("id") == record_id), None)
        if index is None:
            logger.debug("%s:delete 대상 없음 id=%s", type(self).__name__, record_id)
            return False
        del raw_records[index]
        await self.store.set(self.collection_key, raw_records)
        logger.info("%s:delete 성공 id=%s", type(self).__name__, record_id)
        return True

    async def count(self) -> int:
        return len(await self._load_raw())


__all__ = ["CollectionRepository", "generate_id", "utc_now"]
