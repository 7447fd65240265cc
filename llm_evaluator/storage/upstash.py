"""Upstash(Vercel KV) REST API를 이용한 컬렉션 저장소."""

from __future__ import annotations

import json
from typing import Any

import httpx

from llm_evaluator.services.shared.errors import StorageError
from llm_evaluator.utils.logger import get_logger

from .base import CollectionStore

logger = get_logger(__name__)


class UpstashCollectionStore(CollectionStore):
    """키 하나에 JSON 문자열 하나를 저장하는 간단한 Upstash REST 클라이언트."""

    backend_name = "upstash"

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.token = token
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _pipeline(self, commands: list[list[Any]]) -> list[dict[str, Any]]:
        resp = await self._client.post(
            f"{self.url}/pipeline",
            headers={"Authorization": f"Bearer {self.token}"},
            json=commands,
        )
        if resp.status_code >= 400:
            logger.error("Upstash:pipeline 실패 status=%s body=%s", resp.status_code, resp.text[:200])
            raise StorageError(
                f"kv backend error: {resp.status_code}",
                stage="storage",
                upstream_status=resp.status_code,
            )
        data = resp.json()
        # Pipeline 결과는 [{"result": ...}] 또는 [{"error": "..."}] 형태
        if not isinstance(data, list) or not data:
            raise StorageError("kv backend returned an unexpected payload", stage="storage")
        for item in data:
            if isinstance(item, dict) and item.get("error"):
                raise StorageError(f"kv command failed: {item['error']}", stage="storage")
        return data

    async def read(self, key: str) -> Any | None:
        logger.debug("Upstash:read 시작 key=%s", key)
        data = await self._pipeline([["GET", key]])
        raw = data[0].get("result")
        if raw is None:
            logger.debug("Upstash:read 값 없음 key=%s", key)
            return None
        value = json.loads(raw) if isinstance(raw, str) else raw
        logger.debug("Upstash:read 종료 key=%s", key)
        return value

    async def write(self, key: str, value: Any) -> None:
        logger.debug("Upstash:write 시작 key=%s", key)
        payload = json.dumps(value, ensure_ascii=False)
        try:
            await self._pipeline([["SET", key, payload]])
        except httpx.HTTPError as exc:
            logger.error("Upstash:write 연결 실패 key=%s err=%s", key, exc)
            raise StorageError(f"kv backend unavailable: {exc}", stage="storage") from exc
        logger.info("Upstash:write 성공 key=%s", key)

    async def aclose(self) -> None:
        """HTTP 클라이언트를 종료한다."""

        logger.debug("Upstash:aclose 시작")
        await self._client.aclose()
        logger.debug("Upstash:aclose 종료")


__all__ = ["UpstashCollectionStore"]
