"""HTTP API 패키지."""

from .routes import router

__all__ = ["router"]
