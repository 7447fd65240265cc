"""컬렉션 저장소 패키지와 백엔드 선택."""

from __future__ import annotations

from pathlib import Path

from llm_evaluator.utils.config import Settings
from llm_evaluator.utils.logger import get_logger

from .base import CollectionStore, InMemoryCollectionStore
from .local import LocalJsonStore
from .upstash import UpstashCollectionStore

logger = get_logger(__name__)


def build_collection_store(settings: Settings) -> CollectionStore:
    """설정에 맞는 저장소를 한 번만 생성한다.

    `storage_backend=auto`이면 KV 자격 증명이 모두 있을 때 Upstash,
    아니면 로컬 JSON 파일을 사용한다.
    """

    backend = settings.storage_backend
    if backend == "auto":
        backend = "upstash" if settings.has_kv_credentials else "local"

    if backend == "upstash":
        if not settings.has_kv_credentials:
            raise RuntimeError("STORAGE_BACKEND=upstash 이지만 KV_REST_API_URL/KV_REST_API_TOKEN 설정이 없습니다.")
        logger.info("build_collection_store:Upstash 사용 url=%s", settings.kv_rest_api_url)
        return UpstashCollectionStore(
            settings.kv_rest_api_url,
            settings.kv_rest_api_token,
            timeout=settings.upstash_http_timeout,
        )

    data_dir = Path(settings.data_dir)
    logger.info("build_collection_store:로컬 JSON 사용 dir=%s", data_dir.resolve())
    return LocalJsonStore(data_dir)


__all__ = [
    "CollectionStore",
    "InMemoryCollectionStore",
    "LocalJsonStore",
    "UpstashCollectionStore",
    "build_collection_store",
]
