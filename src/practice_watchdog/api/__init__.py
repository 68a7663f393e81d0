"""Practice Watchdog API package.

Exports the FastAPI `app` instance and the `create_app(cfg)` factory, plus
the public Pydantic schemas so callers can import from a single place.

Example
-------
from practice_watchdog.api import create_app, DetectRequest
"""
from __future__ import annotations

from .app import app, can_view_findings, create_app
from .schemas import DetectRequest, DetectResponse, HealthResponse, RuleInfo

__all__ = [
    "app",
    "can_view_findings",
    "create_app",
    # Schemas
    "DetectRequest",
    "DetectResponse",
    "HealthResponse",
    "RuleInfo",
]
