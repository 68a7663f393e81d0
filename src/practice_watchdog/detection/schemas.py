"""Output schemas for the detection engine."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..ingestion.schemas import EntryRejection

__all__ = [
    "Severity",
    "AnomalyCategory",
    "Anomaly",
    "DetectionResult",
    "build_anomaly_id",
]


class Severity(str, Enum):
    """Finding severity, ordered LOW < MEDIUM < HIGH by rank, not by name."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def at_least(self, other: "Severity | str") -> bool:
        return self.rank >= Severity(other).rank

    # str's comparisons would order the values alphabetically
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}


class AnomalyCategory(str, Enum):
    FRIDAY_LATE_DELETE = "FRIDAY_LATE_DELETE"
    UNAUTHORIZED_HIGH_ADJUSTMENT = "UNAUTHORIZED_HIGH_ADJUSTMENT"
    # Reserved; no rule emits it yet.
    BACKDATED_TRANSACTION = "BACKDATED_TRANSACTION"


def build_anomaly_id(entry_id: str, category: AnomalyCategory | str) -> str:
    """Stable id for a (source entry, rule category) pair."""
    return f"AN-{entry_id}-{AnomalyCategory(category).value}"


class Anomaly(BaseModel):
    """A finding emitted when one audit entry matches one rule."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    category: AnomalyCategory
    severity: Severity
    title: str
    description: str
    detected_at: datetime = Field(..., alias="detectedAt", description="When the detection run executed")
    source_entry_id: str = Field(..., alias="sourceEntryId")
    amount: Optional[float] = None

    def same_finding(self, other: "Anomaly") -> bool:
        """Equal in every field except ``detected_at``."""
        return self.model_dump(exclude={"detected_at"}) == other.model_dump(exclude={"detected_at"})


class DetectionResult(BaseModel):
    """Anomalies from the valid entries of a batch plus the entries that were rejected."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    anomalies: List[Anomaly] = Field(default_factory=list)
    rejected: List[EntryRejection] = Field(default_factory=list)
    detected_at: datetime = Field(..., alias="detectedAt")

    @property
    def ok(self) -> bool:
        return not self.rejected
