# src/practice_watchdog/ingestion/readers.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

LOGGER = logging.getLogger("practice_watchdog.ingestion")

# =========================
# Native export mapping
# =========================

# Column names used by the practice-management system's audit-trail export.
NATIVE_COLUMNS: Dict[str, str] = {
    "logDateTime": "timestamp",
    "userNum": "actor_id",
    "userName": "actor_name",
    "userRole": "actor_role",
    "permType": "action_type",
    "logText": "description",
    "patNum": "related_patient_id",
}

# Permission names in that export → ActionType values.
NATIVE_ACTION_TYPES: Dict[str, str] = {
    "PaymentEdit": "PAYMENT_EDIT",
    "PaymentDelete": "PAYMENT_DELETE",
    "Adjustment": "ADJUSTMENT",
    "Other": "OTHER",
}

SUPPORTED_FORMATS = {"csv", "json", "jsonl"}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, dict, tuple)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


# =========================
# Record normalization
# =========================

def normalize_record(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Map one exported row onto AuditLogEntry field names.

    - native export columns are renamed (``permType`` → ``action_type``)
    - native permission names are translated (``PaymentDelete`` → ``PAYMENT_DELETE``)
    - empty cells (None / NaN) are dropped so optional fields stay absent

    Values are otherwise left untouched; validation happens in the schema.
    """
    out: Dict[str, Any] = {}
    for key, value in row.items():
        if _is_missing(value):
            continue
        out[NATIVE_COLUMNS.get(key, key)] = value

    for key in ("action_type", "actionType"):
        value = out.get(key)
        if isinstance(value, str) and value in NATIVE_ACTION_TYPES:
            out[key] = NATIVE_ACTION_TYPES[value]
    return out


# =========================
# File readers
# =========================

def _infer_format(p: Path) -> Optional[str]:
    suffix = p.suffix.lower().lstrip(".")
    return suffix if suffix in SUPPORTED_FORMATS else None


def _read_frame(p: Path, fmt: str) -> pd.DataFrame:
    if fmt == "csv":
        # Keep ids such as "007" intact; the schema parses amounts/timestamps.
        return pd.read_csv(p, dtype=str)
    if fmt == "jsonl":
        return pd.read_json(p, lines=True, dtype=False, convert_dates=False)
    # .json may hold either an array of records or JSON lines
    text = p.read_text(encoding="utf-8").lstrip()
    if text.startswith("["):
        return pd.read_json(p, orient="records", dtype=False, convert_dates=False)
    return pd.read_json(p, lines=True, dtype=False, convert_dates=False)


def read_audit_log(
    path: Union[str, Path],
    fmt: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Read an audit-log export and return normalized raw records (list of dicts).

    Behavior:
      - raises FileNotFoundError for missing files
      - raises ValueError("Unsupported audit log format: <fmt>") otherwise
      - returns [] for empty files
      - records are NOT validated here; pass them to ``detection.scan``
        so malformed rows are reported per entry
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    kind = (fmt or _infer_format(p) or "").lower()
    if kind not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported audit log format: {fmt or p.suffix or p.name}")

    if not p.read_text(encoding="utf-8").strip():
        return []

    frame = _read_frame(p, kind)
    rows = [normalize_record(r) for r in frame.to_dict(orient="records")]
    LOGGER.info("Read %d audit records from %s", len(rows), p)
    return rows
