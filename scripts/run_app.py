"""FastAPI와 Streamlit 대시보드를 함께 실행하는 CLI 스크립트."""

from __future__ import annotations

import os
import subprocess
import sys
import threading
import time
from pathlib import Path

import httpx
import uvicorn

from llm_evaluator.main import app as fastapi_app
from llm_evaluator.utils.config import get_settings
from llm_evaluator.utils.logger import get_logger

logger = get_logger(__name__)
BASE_DIR = Path(__file__).resolve().parents[1]
STREAMLIT_SCRIPT = BASE_DIR / "llm_evaluator" / "ui" / "streamlit_app.py"
FASTAPI_URL_FILE = BASE_DIR / ".fastapi_url"
API_READY_TIMEOUT = 15.0


def _run_fastapi(host: str, port: int) -> None:
    """별도 스레드에서 FastAPI(Uvicorn) 서버를 실행한다."""

    logger.info("FastAPI 서버 시작: http://%s:%s", host, port)
    config = uvicorn.Config(fastapi_app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
    logger.debug("_run_fastapi:종료 host=%s port=%s", host, port)


def _wait_for_api(base_url: str, timeout: float = API_READY_TIMEOUT) -> bool:
    """`/health`가 200을 돌려줄 때까지 기다린다. 대시보드 첫 화면이 저장소 상태를 바로 조회한다."""

    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            if httpx.get(f"{base_url}/health", timeout=1.0).status_code == 200:
                return True
        except httpx.HTTPError as exc:
            logger.debug("_wait_for_api:대기 중 err=%s", exc)
        time.sleep(0.2)
    logger.warning("_wait_for_api:시간 초과 url=%s timeout=%s", base_url, timeout)
    return False


def _ensure_streamlit_config() -> None:
    config_dir = Path.home() / ".streamlit"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.toml"
    if not config_file.exists():
        config_file.write_text("[browser]\ngatherUsageStats = false\n")
        logger.info("_ensure_streamlit_config:config.toml 생성")


def _run_streamlit(port: int, headless: bool, env: dict[str, str]) -> None:
    """지정된 포트에서 Streamlit 대시보드를 실행한다."""

    _ensure_streamlit_config()
    cmd = [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(STREAMLIT_SCRIPT),
        "--server.port",
        str(port),
        f"--server.headless={str(headless).lower()}",
    ]
    logger.info("Streamlit 실행: 포트 %s", port)
    subprocess.run(cmd, check=False, env=env)


def main() -> None:
    """`--api-only`면 FastAPI만, 아니면 FastAPI와 Streamlit을 함께 띄운다."""

    settings = get_settings()
    host = os.getenv("FASTAPI_HOST", settings.fastapi_host)
    fastapi_port = int(os.getenv("PORT") or settings.fastapi_port)
    streamlit_port = int(os.getenv("STREAMLIT_SERVER_PORT") or settings.streamlit_port)

    if "--api-only" in sys.argv[1:]:
        _run_fastapi(host, fastapi_port)
        return

    fastapi_url = f"http://{host}:{fastapi_port}"
    try:
        FASTAPI_URL_FILE.write_text(fastapi_url)
    except OSError as exc:
        logger.warning("FastAPI URL 파일 기록 실패 path=%s err=%s", FASTAPI_URL_FILE, exc)
    os.environ["FASTAPI_URL"] = fastapi_url

    api_thread = threading.Thread(
        target=_run_fastapi,
        args=(host, fastapi_port),
        name="fastapi-thread",
        daemon=True,
    )
    api_thread.start()
    _wait_for_api(fastapi_url)

    logger.info("FastAPI: %s", fastapi_url)
    logger.info("Streamlit: http://%s:%s", host, streamlit_port)

    try:
        _run_streamlit(streamlit_port, settings.streamlit_headless, os.environ.copy())
    except KeyboardInterrupt:
        logger.warning("사용자 중단 감지, Streamlit 종료")


if __name__ == "__main__":
    main()
