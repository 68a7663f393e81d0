"""
Pytest configuration & shared fixtures for Practice Watchdog.

Also ensures modules under `src/` are importable inside tests by
inserting that directory at the front of sys.path.

Provides:
- The four reference audit entries (raw records and validated entries)
- An entry factory for boundary tests
- Audit-log export files in the practice-management system's format
- FastAPI TestClient bound to a freshly built app
"""
from __future__ import annotations

# --- Make `src` importable for tests -----------------------------------------
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

# -----------------------------------------------------------------------------
import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

import pytest

from practice_watchdog.ingestion.schemas import AuditLogEntry
from practice_watchdog.rules import signatures


# ---------------------------------------------------------------------------
# Reference records
# ---------------------------------------------------------------------------

SAMPLE_RECORDS: List[Dict[str, Any]] = [
    {
        "id": "L1",
        "timestamp": "2023-12-08T16:45:00",  # Friday
        "actorId": "102",
        "actorName": "Receptionist Kelly",
        "actorRole": "STAFF",
        "actionType": "PAYMENT_DELETE",
        "description": "Deleted payment of $150.00 cash.",
        "relatedPatientId": "P004",
        "amount": 150.00,
    },
    {
        "id": "L2",
        "timestamp": "2023-12-06T10:30:00",  # Wednesday
        "actorId": "102",
        "actorName": "Receptionist Kelly",
        "actorRole": "STAFF",
        "actionType": "ADJUSTMENT",
        "description": 'Courtesy adjustment for "Service Satisfaction"',
        "relatedPatientId": "P002",
        "amount": 450.00,
    },
    {
        "id": "L3",
        "timestamp": "2023-12-05T09:15:00",  # Tuesday
        "actorId": "101",
        "actorName": "Dr. Aris",
        "actorRole": "OWNER_DOCTOR",
        "actionType": "PAYMENT_EDIT",
        "description": "Corrected check number.",
        "relatedPatientId": "P001",
        "amount": 0,
    },
    {
        "id": "L4",
        "timestamp": "2023-12-08T15:00:00",  # Friday
        "actorId": "101",
        "actorName": "Dr. Aris",
        "actorRole": "OWNER_DOCTOR",
        "actionType": "ADJUSTMENT",
        "description": "Write-off approved at chairside.",
        "relatedPatientId": "P003",
        "amount": 450.00,
    },
]

NATIVE_CSV = """\
id,logDateTime,userNum,userName,userRole,permType,logText,patNum,amount
LOG001,2023-12-08T16:45:00,102,Receptionist Kelly,STAFF,PaymentDelete,Deleted payment of $150.00 cash.,P004,150.00
LOG002,2023-12-06T10:30:00,102,Receptionist Kelly,STAFF,Adjustment,Courtesy adjustment,P002,450.00
LOG003,2023-12-05T09:15:00,007,Dr. Aris,OWNER_DOCTOR,PaymentEdit,Corrected check number.,P001,
"""


@pytest.fixture()
def run_time() -> datetime:
    return datetime(2023, 12, 11, 6, 0, tzinfo=timezone.utc)


@pytest.fixture()
def sample_records() -> List[Dict[str, Any]]:
    return [dict(r) for r in SAMPLE_RECORDS]


@pytest.fixture()
def sample_entries() -> List[AuditLogEntry]:
    return [AuditLogEntry.model_validate(r) for r in SAMPLE_RECORDS]


@pytest.fixture()
def make_entry() -> Callable[..., AuditLogEntry]:
    """Build an entry from L1 with selected fields replaced (snake_case keys)."""

    def _make(**overrides: Any) -> AuditLogEntry:
        base: Dict[str, Any] = {
            "id": "E1",
            "timestamp": "2023-12-08T16:45:00",
            "actor_id": "102",
            "actor_name": "Receptionist Kelly",
            "actor_role": "STAFF",
            "action_type": "PAYMENT_DELETE",
            "description": "",
            "amount": 150.00,
        }
        base.update(overrides)
        return AuditLogEntry.model_validate(base)

    return _make


@pytest.fixture()
def restore_registry():
    """Snapshot the rule registry and put it back after the test."""
    rules = list(signatures.RULES)
    index = dict(signatures.RULE_INDEX)
    try:
        yield signatures
    finally:
        signatures.RULES[:] = rules
        signatures.RULE_INDEX.clear()
        signatures.RULE_INDEX.update(index)


# ---------------------------------------------------------------------------
# Filesystem fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def audit_files(tmp_path: Path) -> Dict[str, Path]:
    data = tmp_path / "data"
    data.mkdir(parents=True, exist_ok=True)
    csv_path = data / "auditlog.csv"
    csv_path.write_text(NATIVE_CSV, encoding="utf-8")
    json_path = data / "auditlog.json"
    json_path.write_text(json.dumps(SAMPLE_RECORDS, indent=2), encoding="utf-8")
    jsonl_path = data / "auditlog.jsonl"
    jsonl_path.write_text("\n".join(json.dumps(r) for r in SAMPLE_RECORDS) + "\n", encoding="utf-8")
    return {"csv": csv_path, "json": json_path, "jsonl": jsonl_path}


# ---------------------------------------------------------------------------
# API client fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def api_client():
    from fastapi.testclient import TestClient

    from practice_watchdog.api.app import create_app

    app = create_app({"timezone": "UTC"})
    with TestClient(app) as client:
        yield client
