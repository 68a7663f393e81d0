"""FastAPI application for Practice Watchdog.

Provides a health check, the rule listing, and a /detect endpoint that runs
the rule engine over a batch of audit-log records. The findings feed is
restricted to the practice owner.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException

from ..config import WatchdogSettings
from ..detection import filter_by_severity, scan, summarize
from ..ingestion.schemas import ActorRole
from ..rules import describe_rules
from ..utils import resolve_timezone
from .schemas import DetectRequest, DetectResponse, HealthResponse, RuleInfo

LOGGER = logging.getLogger("practice_watchdog.api")

VIEWER_ROLES = frozenset({ActorRole.OWNER_DOCTOR})


def can_view_findings(role: ActorRole) -> bool:
    """Only the owner may see the financial-integrity feed."""
    return role in VIEWER_ROLES


# ------------------------------------------------------------------
# Factory & routes
# ------------------------------------------------------------------

def create_app(cfg: Optional[Dict[str, Any]] = None) -> FastAPI:
    settings = WatchdogSettings.from_config(cfg or {})
    app = FastAPI(title="Practice Watchdog API", version="0.1.0")
    app.state.settings = settings

    @app.get("/healthz", response_model=HealthResponse)
    def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/rules", response_model=List[RuleInfo])
    def rules() -> List[RuleInfo]:
        return [RuleInfo(**r) for r in describe_rules()]

    @app.post("/detect", response_model=DetectResponse)
    def detect_endpoint(req: DetectRequest) -> DetectResponse:
        if not can_view_findings(req.viewer_role):
            LOGGER.warning("Denied findings feed to role %s", req.viewer_role.value)
            raise HTTPException(
                status_code=403,
                detail=f"Financial integrity findings are restricted to OWNER_DOCTOR (got {req.viewer_role.value})",
            )

        try:
            tz = resolve_timezone(req.timezone) if req.timezone else settings.timezone
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        result = scan(req.entries, overrides=settings.rule_overrides, tz=tz)
        minimum = req.min_severity or settings.min_severity
        anomalies = filter_by_severity(result.anomalies, minimum)
        LOGGER.info(
            "Scanned %d records: %d anomalies (>= %s), %d rejected",
            len(req.entries), len(anomalies), minimum.value, len(result.rejected),
        )
        summary = summarize(result)
        summary["min_severity"] = minimum.value
        summary["reported"] = len(anomalies)
        return DetectResponse(
            anomalies=anomalies,
            rejected=result.rejected,
            detected_at=result.detected_at,
            summary=summary,
        )

    return app


# Uvicorn import target
app = create_app()
