"""Row schemas for audit-log entries in Practice Watchdog.

Defines the **Pydantic** model used to validate one financial/administrative
action exported from the practice-management system. Keep this module
focused on *schemas only*; file parsing lives in :mod:`.readers`.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

__all__ = [
    "ActorRole",
    "ActionType",
    "AuditLogEntry",
    "EntryRejection",
    "MalformedEntryError",
    "validate_entry",
]


# ------------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------------
class ActorRole(str, Enum):
    OWNER_DOCTOR = "OWNER_DOCTOR"
    OFFICE_MANAGER = "OFFICE_MANAGER"
    STAFF = "STAFF"


class ActionType(str, Enum):
    PAYMENT_EDIT = "PAYMENT_EDIT"
    PAYMENT_DELETE = "PAYMENT_DELETE"
    ADJUSTMENT = "ADJUSTMENT"
    OTHER = "OTHER"


# ------------------------------------------------------------------
# Audit log entry
# ------------------------------------------------------------------
class AuditLogEntry(BaseModel):
    """One recorded action. Immutable once constructed.

    Accepts both snake_case names and the camelCase keys used by the
    dashboard (``actorName``, ``actionType`` ...).
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    id: str = Field(..., min_length=1, description="Stable record identifier")
    timestamp: datetime = Field(..., description="When the action was recorded")
    actor_id: str = Field(..., alias="actorId")
    actor_name: str = Field(..., alias="actorName", description="Display name of the actor")
    actor_role: ActorRole = Field(..., alias="actorRole")
    action_type: ActionType = Field(..., alias="actionType")
    description: str = Field("", description="Free-text note about the action")
    related_patient_id: Optional[str] = Field(None, alias="relatedPatientId")
    amount: Optional[float] = Field(None, description="Monetary value, if any")

    @property
    def amount_or_zero(self) -> float:
        return self.amount if self.amount is not None else 0.0


# ------------------------------------------------------------------
# Rejections
# ------------------------------------------------------------------
class EntryRejection(BaseModel):
    """An input entry that could not be evaluated."""

    model_config = ConfigDict(frozen=True)

    entry_id: str
    field: str
    message: str


class MalformedEntryError(ValueError):
    """Raised when a raw record cannot be turned into an :class:`AuditLogEntry`."""

    def __init__(self, entry_id: str, fields: Tuple[str, ...], message: str) -> None:
        self.entry_id = entry_id
        self.fields = fields
        self.message = message
        super().__init__(f"Malformed audit entry {entry_id!r} ({', '.join(fields)}): {message}")

    @property
    def field(self) -> str:
        return self.fields[0] if self.fields else "<entry>"

    @classmethod
    def from_validation_error(cls, exc: ValidationError, *, entry_id: str) -> "MalformedEntryError":
        fields: List[str] = []
        messages: List[str] = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ())) or "<entry>"
            if loc not in fields:
                fields.append(loc)
            messages.append(f"{loc}: {err.get('msg')}")
        return cls(entry_id, tuple(fields), "; ".join(messages))

    def to_rejection(self) -> EntryRejection:
        return EntryRejection(entry_id=self.entry_id, field=", ".join(self.fields) or "<entry>", message=self.message)


def _raw_entry_id(row: Any, index: Optional[int]) -> str:
    if isinstance(row, Mapping):
        raw = row.get("id")
        if raw not in (None, ""):
            return str(raw)
    return f"<index {index}>" if index is not None else "<unknown>"


def validate_entry(row: Mapping[str, Any], *, index: Optional[int] = None) -> AuditLogEntry:
    """Validate a raw record into an :class:`AuditLogEntry`.

    Parameters
    ----------
    row: Mapping of field name (or camelCase alias) to value.
    index: Position of the record in its batch; used to label records without an id.

    Raises
    ------
    MalformedEntryError
        Naming the entry id and every offending field.
    """
    try:
        return AuditLogEntry.model_validate(row)
    except ValidationError as e:
        raise MalformedEntryError.from_validation_error(e, entry_id=_raw_entry_id(row, index)) from e
