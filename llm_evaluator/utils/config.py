"""환경변수/.env 기반 애플리케이션 설정."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """LLM Evaluator 백엔드 설정.

    필드 이름의 대문자 형태가 환경변수 이름이다(예: `KV_REST_API_URL`).
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # 애플리케이션
    fastapi_title: str = "LLM Evaluator API"
    fastapi_version: str = "0.1.0"
    fastapi_host: str = "127.0.0.1"
    fastapi_port: int = 8000
    streamlit_port: int = 8501
    streamlit_headless: bool = True
    environment: Literal["development", "production"] = "development"
    callback_base_url: str | None = None

    # 저장소
    storage_backend: Literal["auto", "local", "upstash"] = "auto"
    data_dir: str = "data"
    kv_rest_api_url: str | None = None
    kv_rest_api_token: str | None = None
    upstash_http_timeout: float = 5.0

    # 평가(채점) 모델
    openai_api_key: str | None = None
    grader_endpoint: str = "https://api.openai.com/v1/chat/completions"
    grader_model: str = "gpt-4o"
    llm_http_timeout: float = 120.0

    # 기본 평가 프롬프트
    prompt_root: str = "prompts"
    default_prompt_version: str = "v1"
    seed_default_prompt: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_kv_credentials(self) -> bool:
        return bool(self.kv_rest_api_url and self.kv_rest_api_token)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """`.env`/환경변수를 읽어 만든 `Settings`를 캐시해 반환한다."""

    return Settings()


__all__ = ["Settings", "get_settings"]
