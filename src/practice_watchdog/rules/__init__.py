"""Rule-based detection package for Practice Watchdog.

Holds the ordered registry of financial-integrity rules. Typical usage:

from practice_watchdog.rules import RULES, register_rule
"""
from __future__ import annotations

from .signatures import (
    RULE_INDEX,
    RULES,
    Rule,
    describe_rules,
    format_money,
    get_rule,
    localize,
    register_rule,
)

__all__ = [
    "RULE_INDEX",
    "RULES",
    "Rule",
    "describe_rules",
    "format_money",
    "get_rule",
    "localize",
    "register_rule",
]
