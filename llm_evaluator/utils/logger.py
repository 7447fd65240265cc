"""프로젝트 전역에서 재사용할 이모지 기반 로거 유틸리티."""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path

LEVEL_EMOJI: dict[int, str] = {
    logging.DEBUG: "🛠️",
    logging.INFO: "✅",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}


class _Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    TIME = "\033[90m"
    NAME = "\033[94m"
    DEBUG = "\033[36m"  # Cyan
    INFO = "\033[92m"  # Green
    WARNING = "\033[93m"  # Yellow
    ERROR = "\033[91m"  # Red
    CRITICAL = "\033[95m"  # Magenta


LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: _Colors.DEBUG,
    logging.INFO: _Colors.INFO,
    logging.WARNING: _Colors.WARNING,
    logging.ERROR: _Colors.ERROR,
    logging.CRITICAL: _Colors.CRITICAL,
}


class EmojiFormatter(logging.Formatter):
    """로그 레코드에 로그 레벨에 따른 이모지와 색상을 붙인다."""

    def __init__(self, datefmt: str | None = None, use_color: bool = True) -> None:
        super().__init__(datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        emoji = LEVEL_EMOJI.get(record.levelno, "")
        time_str = self.formatTime(record, self.datefmt)
        message = record.getMessage()
        if self.use_color:
            level_color = LEVEL_COLORS.get(record.levelno, _Colors.RESET)
            level_name = f"{_Colors.BOLD}{level_color}{record.levelname}{_Colors.RESET}"
            logger_name = f"{_Colors.NAME}{record.name}{_Colors.RESET}"
            time_str = f"{_Colors.TIME}{time_str}{_Colors.RESET}"
        else:
            level_name = record.levelname
            logger_name = record.name
        formatted = f"{emoji} [{level_name}] {time_str} {logger_name} - {message}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def _file_logging_enabled() -> bool:
    return os.getenv("LOG_TO_FILE", "1").lower() not in ("0", "false", "no")


def _log_dir() -> Path:
    override = os.getenv("LOG_DIR")
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2] / "logs"


def get_logger(name: str) -> logging.Logger:
    """콘솔과 날짜별 파일(`logs/YYYY-MM-DD.log`)에 기록하는 프로젝트 전용 로거를 반환한다.

    `LOG_TO_FILE=0`이면 파일 핸들러 없이 콘솔에만 남긴다. `LOG_DIR`로 파일 위치를 바꿀 수 있다.
    """

    logger = logging.getLogger(name)
    logger.setLevel(os.getenv("LOG_LEVEL", "DEBUG").upper())

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(EmojiFormatter(datefmt="%H:%M:%S"))
        logger.addHandler(console_handler)

        if _file_logging_enabled():
            logs_dir = _log_dir()
            logs_dir.mkdir(parents=True, exist_ok=True)
            file_path = logs_dir / f"{date.today().isoformat()}.log"
            file_handler = logging.FileHandler(file_path, encoding="utf-8")
            # 파일에는 ANSI 색상 코드를 남기지 않음
            file_handler.setFormatter(EmojiFormatter(datefmt="%Y-%m-%d %H:%M:%S", use_color=False))
            logger.addHandler(file_handler)

        logger.propagate = False
    return logger


__all__ = ["EmojiFormatter", "get_logger"]
