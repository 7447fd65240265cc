"""컬렉션 저장소 공통 인터페이스."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any

from llm_evaluator.services.shared.errors import StorageError
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)


class CollectionStore(ABC):
    """이름(key)으로 구분되는 JSON 직렬화 가능한 값을 통째로 읽고 쓰는 저장소.

    부분 갱신 기능은 없다. 변경은 항상 컬렉션 전체를 읽고, 한 요소를 고친 뒤,
    전체를 다시 쓴다. 잠금이 없으므로 동시에 쓰면 마지막 쓰기가 이긴다.
    """

    backend_name: str = "abstract"

    @abstractmethod
    async def read(self, key: str) -> Any | None:
        """키에 저장된 값을 돌려준다. 없으면 None. 실패 시 예외를 던진다."""

    @abstractmethod
    async def write(self, key: str, value: Any) -> None:
        """키의 값을 통째로 교체한다. 실패 시 `StorageError`."""

    async def get(self, key: str) -> list[Any]:
        """컬렉션을 읽는다. 값이 없거나 읽기에 실패하면 빈 리스트."""

        try:
            value = await self.read(key)
        except Exception as exc:
            logger.error("CollectionStore.get:읽기 실패 backend=%s key=%s err=%s", self.backend_name, key, exc)
            return []
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("CollectionStore.get:리스트가 아님 backend=%s key=%s type=%s", self.backend_name, key, type(value).__name__)
            return []
        return value

    async def set(self, key: str, records: list[Any]) -> None:
        """컬렉션 전체를 교체한다."""

        try:
            await self.write(key, records)
        except StorageError:
            raise
        except Exception as exc:
            logger.error("CollectionStore.set:쓰기 실패 backend=%s key=%s err=%s", self.backend_name, key, exc)
            raise StorageError(f"failed to write collection '{key}': {exc}", stage="storage") from exc

    async def aclose(self) -> None:
        """보유한 리소스를 정리한다."""


class InMemoryCollectionStore(CollectionStore):
    """프로세스 메모리에만 보관하는 저장소 (테스트/임시 실행용)."""

    backend_name = "memory"

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def read(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def write(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


__all__ = ["CollectionStore", "InMemoryCollectionStore"]
