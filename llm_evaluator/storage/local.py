"""로컬 JSON 파일 기반 컬렉션 저장소."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from llm_evaluator.services.shared.errors import StorageError
from llm_evaluator.utils.logger import get_logger

from .base import CollectionStore

logger = get_logger(__name__)


class LocalJsonStore(CollectionStore):
    """키마다 `<data_dir>/<key>.json` 파일 하나를 사용한다."""

    backend_name = "local"

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read_sync(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_sync(self, key: str, value: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        # 임시 파일에 쓴 뒤 교체해 반쯤 쓰인 파일이 남지 않게 한다
        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def read(self, key: str) -> Any | None:
        logger.debug("LocalJsonStore.read:시작 key=%s", key)
        return await asyncio.to_thread(self._read_sync, key)

    async def write(self, key: str, value: Any) -> None:
        logger.debug("LocalJsonStore.write:시작 key=%s", key)
        try:
            await asyncio.to_thread(self._write_sync, key, value)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("LocalJsonStore.write:실패 key=%s err=%s", key, exc)
            raise StorageError(f"failed to write {self.path_for(key)}: {exc}", stage="storage") from exc
        logger.info("LocalJsonStore.write:성공 key=%s", key)


__all__ = ["LocalJsonStore"]
