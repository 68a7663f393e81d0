"""Financial-integrity rule signatures for Practice Watchdog.

These rules flag clear-cut patterns in the accounting audit trail
(payment deletions timed to dodge same-week reconciliation, large
adjustments issued without owner approval).

Each rule is a pure predicate + formatter pair over a **single**
:class:`AuditLogEntry`. Rules never see each other's results, so one
entry may trip several of them. The engine evaluates ``RULES`` in
registration order; adding a rule is a call to :func:`register_rule`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Callable, Dict, List, Optional

from ..detection.schemas import AnomalyCategory, Severity, build_anomaly_id
from ..ingestion.schemas import ActionType, ActorRole, AuditLogEntry
from ..utils import DEFAULT_TIMEZONE, resolve_timezone

FRIDAY = 4  # datetime.weekday()


# ---------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------

def localize(ts: datetime, tz: Optional[tzinfo]) -> datetime:
    """Return ``ts`` as practice wall-clock time.

    Offset-aware timestamps are converted into ``tz``. Naive timestamps are
    already wall-clock time as recorded by the source system and are kept.
    """
    if tz is None or ts.tzinfo is None:
        return ts
    return ts.astimezone(tz)


def format_money(amount: Optional[float]) -> str:
    return f"${(amount or 0.0):,.2f}"


@dataclass(frozen=True)
class Rule:
    name: str
    category: AnomalyCategory
    severity: Severity
    title: str
    predicate: Callable[[AuditLogEntry, Dict[str, Any]], bool]
    formatter: Callable[[AuditLogEntry, Dict[str, Any]], str]
    defaults: Dict[str, Any] = field(default_factory=dict)

    def config(self, overrides: Optional[Dict[str, Any]] = None, *, tz: Optional[tzinfo] = None) -> Dict[str, Any]:
        """Defaults merged with ``overrides``; ``tz`` falls back to UTC."""
        cfg = {**self.defaults, **(overrides or {})}
        cfg["tz"] = resolve_timezone(DEFAULT_TIMEZONE if tz is None else tz)
        return cfg

    def evaluate(self, entry: AuditLogEntry, cfg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Anomaly fields (all but ``detected_at``) if the entry matches, else None."""
        if not self.predicate(entry, cfg):
            return None
        return {
            "id": build_anomaly_id(entry.id, self.category),
            "category": self.category,
            "severity": self.severity,
            "title": self.title,
            "description": self.formatter(entry, cfg),
            "source_entry_id": entry.id,
            "amount": entry.amount,
        }


# ---------------------------------------------------------------------
# Rule implementations
# ---------------------------------------------------------------------

def _rule_friday_late_delete(entry: AuditLogEntry, cfg: Dict[str, Any]) -> bool:
    """Payment deleted on a Friday afternoon (local time)."""
    if entry.action_type is not ActionType.PAYMENT_DELETE:
        return False
    local = localize(entry.timestamp, cfg.get("tz"))
    return local.weekday() == FRIDAY and local.hour >= int(cfg["min_hour"])


def _describe_friday_late_delete(entry: AuditLogEntry, cfg: Dict[str, Any]) -> str:
    return (
        f"User {entry.actor_name} deleted a payment of {format_money(entry.amount)} "
        "on a Friday afternoon. This is a common pattern for embezzlement."
    )


def _rule_unauthorized_high_adjustment(entry: AuditLogEntry, cfg: Dict[str, Any]) -> bool:
    """Adjustment above the approval threshold by anyone but the owner."""
    return (
        entry.action_type is ActionType.ADJUSTMENT
        and entry.amount_or_zero > float(cfg["min_amount"])
        and entry.actor_role is not ActorRole.OWNER_DOCTOR
    )


def _describe_unauthorized_high_adjustment(entry: AuditLogEntry, cfg: Dict[str, Any]) -> str:
    return (
        f"User {entry.actor_name} ({entry.actor_role.value}) performed an adjustment of "
        f"{format_money(entry.amount)}. Adjustments over {format_money(cfg['min_amount'])} "
        "should typically be approved by an Owner."
    )


# ---------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------

RULES: List[Rule] = [
    Rule(
        name="friday_late_delete",
        category=AnomalyCategory.FRIDAY_LATE_DELETE,
        severity=Severity.HIGH,
        title="Suspicious Deletion (Friday)",
        predicate=_rule_friday_late_delete,
        formatter=_describe_friday_late_delete,
        defaults={"min_hour": 12},
    ),
    Rule(
        name="unauthorized_high_adjustment",
        category=AnomalyCategory.UNAUTHORIZED_HIGH_ADJUSTMENT,
        severity=Severity.MEDIUM,
        title="High-Value Adjustment by Staff",
        predicate=_rule_unauthorized_high_adjustment,
        formatter=_describe_unauthorized_high_adjustment,
        defaults={"min_amount": 200.00},
    ),
]

RULE_INDEX: Dict[str, Rule] = {r.name: r for r in RULES}


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def register_rule(rule: Rule) -> Rule:
    """Append a rule to the default registry (evaluated after existing rules)."""
    if rule.name in RULE_INDEX:
        raise ValueError(f"Rule already registered: {rule.name}")
    RULES.append(rule)
    RULE_INDEX[rule.name] = rule
    return rule


def get_rule(rule_name: str) -> Rule:
    if rule_name not in RULE_INDEX:
        raise KeyError(f"Unknown rule: {rule_name}")
    return RULE_INDEX[rule_name]


def describe_rules(rules: Optional[List[Rule]] = None) -> List[Dict[str, Any]]:
    """Plain-dict view of a rule list (defaults to the registry), in evaluation order."""
    return [
        {
            "name": r.name,
            "category": r.category.value,
            "severity": r.severity.value,
            "title": r.title,
            "defaults": dict(r.defaults),
        }
        for r in (RULES if rules is None else rules)
    ]
