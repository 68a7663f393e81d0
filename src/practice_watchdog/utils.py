"""Utility helpers for Practice Watchdog."""
from __future__ import annotations

import json
from datetime import tzinfo
from pathlib import Path
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "UTC"


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists and return as Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def save_json(obj: Any, path: str | Path, indent: int = 2) -> None:
    """Save a JSON-serializable object, creating parent dirs."""
    p = Path(path)
    ensure_dir(p.parent)
    with p.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=indent, ensure_ascii=False, default=str)


def resolve_timezone(tz: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    """Turn an IANA name into a tzinfo; tzinfo and None pass through.

    Raises ValueError for unknown names so a typo never falls back to host time.
    """
    if tz is None or isinstance(tz, tzinfo):
        return tz
    name = str(tz).strip()
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e
