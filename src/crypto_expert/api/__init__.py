"""HTTP API: FastAPI app factory, dependency wiring and rate limiting."""

from .app import create_app

__all__ = ["create_app"]
