"""
Practice Watchdog configuration loader.

Supports JSON or YAML configs. Also merges in environment variable overrides
(prefixed with PRACTICE_WATCHDOG_).

Recognized keys
---------------
timezone      IANA name of the practice timezone (default: UTC)
min_severity  lowest severity reported by the CLI/API (default: LOW)
rules         mapping of rule name -> threshold overrides

Environment values are strings, except PRACTICE_WATCHDOG_RULES, which is
parsed as a JSON object.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict

import yaml

from .detection.schemas import Severity
from .utils import DEFAULT_TIMEZONE, resolve_timezone

ENV_PREFIX = "PRACTICE_WATCHDOG_"
JSON_ENV_KEYS = frozenset({"rules"})


def load_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load configuration dict from file (JSON or YAML).
    Falls back to empty dict if no path is given.
    Environment variables prefixed with PRACTICE_WATCHDOG_ override keys.
    """
    cfg: Dict[str, Any] = {}

    if path is not None:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config not found: {p}")
        with p.open("r", encoding="utf-8") as f:
            if p.suffix.lower() in {".yaml", ".yml"}:
                cfg = yaml.safe_load(f) or {}
            else:
                cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError(f"Config must be a mapping: {p}")

    for k, v in os.environ.items():
        if not k.startswith(ENV_PREFIX):
            continue
        key = k.removeprefix(ENV_PREFIX).lower()
        if key in JSON_ENV_KEYS:
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"{k} must be a JSON object: {e}") from e
        cfg[key] = v

    return cfg


def get(key: str, default: Any = None, *, config: Dict[str, Any] | None = None) -> Any:
    """
    Fetch a single config value (case-insensitive).
    """
    if config is None:
        config = {}
    return config.get(key.lower(), default)


@dataclass(frozen=True)
class WatchdogSettings:
    """Resolved settings handed explicitly to the engine callers."""

    timezone: tzinfo
    min_severity: Severity = Severity.LOW
    rule_overrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any] | None = None) -> "WatchdogSettings":
        cfg = cfg or {}
        tz = resolve_timezone(get("timezone", DEFAULT_TIMEZONE, config=cfg) or DEFAULT_TIMEZONE)
        severity = str(get("min_severity", Severity.LOW.value, config=cfg)).upper()
        try:
            min_severity = Severity(severity)
        except ValueError as e:
            raise ValueError(f"Unknown severity: {severity}") from e
        overrides = get("rules", {}, config=cfg) or {}
        if not isinstance(overrides, dict):
            raise ValueError("'rules' config must map rule names to override mappings")
        return cls(timezone=tz, min_severity=min_severity, rule_overrides=dict(overrides))
