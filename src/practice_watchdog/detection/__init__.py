"""Detection package: anomaly schemas, the engine, and post-processing."""
from __future__ import annotations

# Schemas first: the rule registry imports them while the engine loads.
from .schemas import (
    Anomaly,
    AnomalyCategory,
    DetectionResult,
    Severity,
    build_anomaly_id,
)

from .engine import detect, scan

from .postprocess import (
    anomalies_to_frame,
    filter_by_severity,
    format_category,
    high_severity_alerts,
    summarize,
)

__all__ = [
    # schemas
    "Anomaly",
    "AnomalyCategory",
    "DetectionResult",
    "Severity",
    "build_anomaly_id",
    # engine
    "detect",
    "scan",
    # postprocess
    "anomalies_to_frame",
    "filter_by_severity",
    "format_category",
    "high_severity_alerts",
    "summarize",
]
