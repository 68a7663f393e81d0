import pandas as pd
import pytest

from practice_watchdog.detection import (
    AnomalyCategory,
    Severity,
    anomalies_to_frame,
    detect,
    filter_by_severity,
    format_category,
    high_severity_alerts,
    scan,
    summarize,
)
from practice_watchdog.detection.postprocess import ANOMALY_COLUMNS


@pytest.fixture()
def anomalies(sample_entries, run_time):
    return detect(sample_entries, now=run_time)


def test_filter_by_severity(anomalies):
    assert [a.source_entry_id for a in filter_by_severity(anomalies, "LOW")] == ["L1", "L2"]
    assert [a.source_entry_id for a in filter_by_severity(anomalies, Severity.MEDIUM)] == ["L1", "L2"]
    assert [a.source_entry_id for a in filter_by_severity(anomalies, "HIGH")] == ["L1"]


def test_filter_by_severity_unknown_level(anomalies):
    with pytest.raises(ValueError):
        filter_by_severity(anomalies, "CRITICAL")


def test_high_severity_alerts(anomalies):
    alerts = high_severity_alerts(anomalies)
    assert [a.category for a in alerts] == [AnomalyCategory.FRIDAY_LATE_DELETE]


def test_severity_ordering():
    assert Severity.HIGH.at_least(Severity.MEDIUM)
    assert Severity.MEDIUM.at_least("MEDIUM")
    assert not Severity.LOW.at_least(Severity.MEDIUM)

    assert Severity.LOW < Severity.MEDIUM < Severity.HIGH
    assert Severity.HIGH >= Severity.HIGH > Severity.LOW
    assert sorted(Severity) == [Severity.LOW, Severity.MEDIUM, Severity.HIGH]
    assert max(Severity) is Severity.HIGH


def test_format_category():
    assert format_category(AnomalyCategory.FRIDAY_LATE_DELETE) == "FRIDAY LATE DELETE"
    assert format_category("UNAUTHORIZED_HIGH_ADJUSTMENT") == "UNAUTHORIZED HIGH ADJUSTMENT"


def test_anomalies_to_frame(anomalies):
    df = anomalies_to_frame(anomalies)
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ANOMALY_COLUMNS
    assert df["category"].tolist() == ["FRIDAY_LATE_DELETE", "UNAUTHORIZED_HIGH_ADJUSTMENT"]


def test_anomalies_to_frame_empty():
    df = anomalies_to_frame([])
    assert df.empty
    assert list(df.columns) == ANOMALY_COLUMNS


def test_summarize_result(sample_records, run_time):
    records = sample_records + [dict(sample_records[0], id="BAD", actionType="REFUND")]
    summary = summarize(scan(records, now=run_time))
    assert summary["total"] == 2
    assert summary["by_severity"] == {"LOW": 0, "MEDIUM": 1, "HIGH": 1}
    assert summary["by_category"] == {
        "FRIDAY_LATE_DELETE": 1,
        "UNAUTHORIZED_HIGH_ADJUSTMENT": 1,
    }
    assert summary["flagged_amount"] == 600.0
    assert summary["rejected"] == 1
    assert summary["detected_at"] == run_time.isoformat()


def test_summarize_empty_list():
    summary = summarize([])
    assert summary["total"] == 0
    assert summary["by_severity"] == {"LOW": 0, "MEDIUM": 0, "HIGH": 0}
    assert summary["by_category"] == {}
    assert summary["flagged_amount"] == 0.0
    assert summary["detected_at"] is None
