"""Post-processing utilities for detection results.

These helpers turn an anomaly list into what the consumers need: a
severity-filtered feed, the instant-alert subset, a digest summary, and a
DataFrame for export. They are used by the CLI and API layers.
"""
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from .schemas import Anomaly, AnomalyCategory, DetectionResult, Severity

ANOMALY_COLUMNS = [
    "id",
    "category",
    "severity",
    "title",
    "description",
    "detected_at",
    "source_entry_id",
    "amount",
]


# ---------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------

def filter_by_severity(anomalies: Sequence[Anomaly], minimum: Union[Severity, str]) -> List[Anomaly]:
    """Keep anomalies at or above ``minimum``, preserving order."""
    floor = Severity(minimum)
    return [a for a in anomalies if a.severity.at_least(floor)]


def high_severity_alerts(anomalies: Sequence[Anomaly]) -> List[Anomaly]:
    """Anomalies that warrant an immediate notification."""
    return filter_by_severity(anomalies, Severity.HIGH)


def format_category(category: Union[AnomalyCategory, str]) -> str:
    """Display label for a category, e.g. ``FRIDAY LATE DELETE``."""
    return AnomalyCategory(category).value.replace("_", " ")


# ---------------------------------------------------------------------
# DataFrame helpers
# ---------------------------------------------------------------------

def anomalies_to_frame(anomalies: Sequence[Anomaly]) -> pd.DataFrame:
    """One row per anomaly, enum columns as plain strings."""
    rows = [a.model_dump(mode="json") for a in anomalies]
    return pd.DataFrame(rows, columns=ANOMALY_COLUMNS)


def summarize(result: Union[DetectionResult, Sequence[Anomaly]]) -> Dict[str, Any]:
    """Digest payload: counts by severity and category, flagged amount total.

    Every severity appears in ``by_severity`` (zero when absent); categories
    appear only when at least one anomaly has them.
    """
    if isinstance(result, DetectionResult):
        anomalies: Sequence[Anomaly] = result.anomalies
        rejected = len(result.rejected)
        detected_at = result.detected_at.isoformat()
    else:
        anomalies = result
        rejected = 0
        detected_at = None

    frame = anomalies_to_frame(anomalies)
    by_severity = (
        frame["severity"].value_counts().reindex([s.value for s in Severity], fill_value=0)
    )
    by_category = frame["category"].value_counts()
    flagged_amount = pd.to_numeric(frame["amount"], errors="coerce").fillna(0.0).sum()

    return {
        "total": int(len(frame)),
        "by_severity": {k: int(v) for k, v in by_severity.items()},
        "by_category": {k: int(v) for k, v in by_category.items()},
        "flagged_amount": round(float(flagged_amount), 2),
        "rejected": rejected,
        "detected_at": detected_at,
    }
