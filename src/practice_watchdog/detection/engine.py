"""Detection engine: apply every rule to every audit entry.

Output order is part of the contract: anomalies are sorted by the source
entry's position in the input, then by rule registration order. The engine
is stateless and never mutates its inputs.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..ingestion.schemas import AuditLogEntry, EntryRejection, MalformedEntryError, validate_entry
from ..rules.signatures import RULES, Rule
from ..utils import DEFAULT_TIMEZONE, resolve_timezone
from .schemas import Anomaly, DetectionResult

LOGGER = logging.getLogger("practice_watchdog.detection")

RuleOverrides = Dict[str, Dict[str, Any]]


def detect(
    entries: Iterable[AuditLogEntry],
    *,
    rules: Optional[Sequence[Rule]] = None,
    overrides: Optional[RuleOverrides] = None,
    tz: Union[str, tzinfo, None] = None,
    now: Optional[datetime] = None,
) -> List[Anomaly]:
    """Evaluate ``rules`` (default: the registry) against ``entries``.

    Parameters
    ----------
    entries : validated :class:`AuditLogEntry` objects, in feed order.
    rules : rule list to evaluate instead of the registry.
    overrides : mapping of rule name -> threshold overrides.
    tz : practice timezone (IANA name or tzinfo) for weekday/hour checks;
        defaults to UTC.
    now : detection-run timestamp; defaults to the current UTC time.

    Raises
    ------
    TypeError
        If an item is not an AuditLogEntry. Use :func:`scan` for raw records.
    """
    active = list(RULES if rules is None else rules)
    practice_tz = resolve_timezone(DEFAULT_TIMEZONE if tz is None else tz)
    detected_at = now or datetime.now(timezone.utc)
    configs = [r.config((overrides or {}).get(r.name), tz=practice_tz) for r in active]

    anomalies: List[Anomaly] = []
    n_entries = 0
    for position, entry in enumerate(entries):
        if not isinstance(entry, AuditLogEntry):
            raise TypeError(
                f"detect() expects AuditLogEntry items, got {type(entry).__name__} at position {position}"
            )
        n_entries += 1
        for rule, cfg in zip(active, configs):
            fields = rule.evaluate(entry, cfg)
            if fields is not None:
                anomalies.append(Anomaly(detected_at=detected_at, **fields))

    LOGGER.debug(
        "Evaluated %d rules over %d entries: %d anomalies", len(active), n_entries, len(anomalies)
    )
    return anomalies


def scan(
    records: Iterable[Union[AuditLogEntry, Mapping[str, Any]]],
    *,
    rules: Optional[Sequence[Rule]] = None,
    overrides: Optional[RuleOverrides] = None,
    tz: Union[str, tzinfo, None] = None,
    now: Optional[datetime] = None,
) -> DetectionResult:
    """Validate raw records one by one, then :func:`detect` over the valid ones.

    A malformed record is reported as an :class:`EntryRejection` and does not
    stop the rest of the batch from being evaluated.
    """
    detected_at = now or datetime.now(timezone.utc)
    entries: List[AuditLogEntry] = []
    rejected: List[EntryRejection] = []

    for index, record in enumerate(records):
        if isinstance(record, AuditLogEntry):
            entries.append(record)
            continue
        try:
            entries.append(validate_entry(record, index=index))
        except MalformedEntryError as e:
            LOGGER.warning("Rejected audit entry %s: %s", e.entry_id, e.message)
            rejected.append(e.to_rejection())

    anomalies = detect(entries, rules=rules, overrides=overrides, tz=tz, now=detected_at)
    return DetectionResult(anomalies=anomalies, rejected=rejected, detected_at=detected_at)
