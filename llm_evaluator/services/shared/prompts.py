"""번들 프롬프트 파일 로딩 유틸리티."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from llm_evaluator.utils.config import get_settings
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PROMPT_NAME = "evaluation_default"


def _prompt_root(prompt_root: str | None = None) -> Path:
    root = Path(prompt_root or get_settings().prompt_root)
    if not root.is_absolute():
        package_root = Path(__file__).resolve().parents[2]
        root = (package_root / root).resolve()
    return root


@lru_cache(maxsize=32)
def load_prompt(name: str, version: str, prompt_root: str | None = None) -> str:
    """`<prompt_root>/<name>@<version>.md` 파일을 읽는다."""

    path = _prompt_root(prompt_root) / f"{name}@{version}.md"
    if not path.exists():
        raise FileNotFoundError(f"prompt file not found: {path}")
    content = path.read_text(encoding="utf-8")
    logger.info("prompt_loaded name=%s version=%s path=%s", name, version, path)
    return content


__all__ = ["DEFAULT_PROMPT_NAME", "load_prompt"]
