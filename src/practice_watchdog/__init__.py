"""Practice Watchdog – rule-based financial anomaly detection over audit logs.

Subpackages:
- ingestion: audit-entry schemas and export readers
- detection: anomaly schemas, the engine, and post-processing
- rules: the ordered rule registry
- api: FastAPI app and schemas (imported on demand)
"""
from __future__ import annotations

__version__ = "0.1.0"

# detection must load before rules: the registry imports detection.schemas.
from .detection import Anomaly, AnomalyCategory, DetectionResult, Severity, detect, scan
from .ingestion import ActionType, ActorRole, AuditLogEntry, EntryRejection, MalformedEntryError
from .rules import RULES, Rule, register_rule

__all__ = [
    "Anomaly",
    "AnomalyCategory",
    "DetectionResult",
    "Severity",
    "detect",
    "scan",
    "ActionType",
    "ActorRole",
    "AuditLogEntry",
    "EntryRejection",
    "MalformedEntryError",
    "RULES",
    "Rule",
    "register_rule",
]
