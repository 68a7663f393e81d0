"""Pydantic schemas for the Practice Watchdog API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..detection.schemas import Anomaly, Severity
from ..ingestion.schemas import ActorRole, EntryRejection


class HealthResponse(BaseModel):
    """Simple health check response."""
    status: str = Field(..., description="Service status, e.g. 'ok'")


class RuleInfo(BaseModel):
    name: str
    category: str
    severity: str
    title: str
    defaults: Dict[str, Any] = Field(default_factory=dict)


class DetectRequest(BaseModel):
    """Request body for /detect.

    - `entries` are raw audit records; each is validated on its own so one
      malformed record is reported instead of failing the whole request.
    - `viewer_role` is the role of the user asking for the findings feed.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "viewer_role": "OWNER_DOCTOR",
                "entries": [
                    {
                        "id": "LOG001",
                        "timestamp": "2023-12-08T16:45:00",
                        "actorId": "102",
                        "actorName": "Receptionist Kelly",
                        "actorRole": "STAFF",
                        "actionType": "PAYMENT_DELETE",
                        "description": "Deleted payment of $150.00 cash.",
                        "relatedPatientId": "P004",
                        "amount": 150.0,
                    }
                ],
            }
        }
    )

    # Items stay untyped here; scan() rejects non-object items one by one.
    entries: List[Any] = Field(..., description="Audit-log records to evaluate")
    viewer_role: ActorRole = Field(..., description="Role of the requesting user")
    min_severity: Optional[Severity] = Field(None, description="Lowest severity to return")
    timezone: Optional[str] = Field(None, description="Practice timezone override (IANA name)")


class DetectResponse(BaseModel):
    """Response body for /detect."""
    model_config = ConfigDict(populate_by_name=True)

    anomalies: List[Anomaly]
    rejected: List[EntryRejection]
    detected_at: datetime = Field(..., alias="detectedAt")
    summary: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "HealthResponse",
    "RuleInfo",
    "DetectRequest",
    "DetectResponse",
]
