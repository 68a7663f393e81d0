"""Audit-log ingestion (schemas and file readers) for Practice Watchdog."""
from .readers import (
    NATIVE_ACTION_TYPES,
    NATIVE_COLUMNS,
    normalize_record,
    read_audit_log,
)
from .schemas import (
    ActionType,
    ActorRole,
    AuditLogEntry,
    EntryRejection,
    MalformedEntryError,
    validate_entry,
)

__all__ = [
    "NATIVE_ACTION_TYPES",
    "NATIVE_COLUMNS",
    "normalize_record",
    "read_audit_log",
    "ActionType",
    "ActorRole",
    "AuditLogEntry",
    "EntryRejection",
    "MalformedEntryError",
    "validate_entry",
]
