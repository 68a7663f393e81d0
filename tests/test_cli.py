"""CLI tests for Practice Watchdog."""
from __future__ import annotations

import json

import pandas as pd
import pytest

from practice_watchdog.cli import build_parser, main


def _last_json(capsys):
    out = capsys.readouterr().out.strip().splitlines()
    return json.loads(out[-1])


def test_detect_to_stdout(audit_files, capsys):
    assert main(["detect", "--input", str(audit_files["csv"])]) == 0
    summary = _last_json(capsys)
    assert summary["total"] == 2
    assert summary["reported"] == 2
    assert [a["sourceEntryId"] for a in summary["anomalies"]] == ["LOG001", "LOG002"]


def test_detect_writes_jsonl(audit_files, tmp_path, capsys):
    out = tmp_path / "out" / "anomalies.jsonl"
    assert main(["detect", "--input", str(audit_files["json"]), "--output", str(out)]) == 0
    lines = out.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["id"] for line in lines] == [
        "AN-L1-FRIDAY_LATE_DELETE",
        "AN-L2-UNAUTHORIZED_HIGH_ADJUSTMENT",
    ]
    summary = _last_json(capsys)
    assert summary["format"] == "jsonl"
    assert summary["output"] == str(out)


def test_detect_writes_csv_with_min_severity(audit_files, tmp_path, capsys):
    out = tmp_path / "anomalies.csv"
    rc = main([
        "detect", "--input", str(audit_files["jsonl"]),
        "--output", str(out), "--min-severity", "HIGH",
    ])
    assert rc == 0
    df = pd.read_csv(out)
    assert df["source_entry_id"].tolist() == ["L1"]
    assert _last_json(capsys)["reported"] == 1


def test_detect_strict_exit_code(tmp_path, capsys):
    p = tmp_path / "broken.jsonl"
    p.write_text(
        json.dumps({"id": "X1", "timestamp": "garbage", "actorId": "1", "actorName": "A",
                    "actorRole": "STAFF", "actionType": "OTHER"}) + "\n",
        encoding="utf-8",
    )
    assert main(["detect", "--input", str(p)]) == 0
    summary = _last_json(capsys)
    assert summary["rejected"] == 1
    assert summary["rejected_entries"][0]["entry_id"] == "X1"

    assert main(["detect", "--input", str(p), "--strict"]) == 1


def test_detect_uses_config_overrides(audit_files, tmp_path, capsys):
    cfg = tmp_path / "practice.yaml"
    cfg.write_text("rules:\n  unauthorized_high_adjustment:\n    min_amount: 1000\n", encoding="utf-8")
    assert main(["detect", "--input", str(audit_files["csv"]), "--config", str(cfg)]) == 0
    assert [a["sourceEntryId"] for a in _last_json(capsys)["anomalies"]] == ["LOG001"]


def test_rules_command(capsys):
    assert main(["rules"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in payload] == ["friday_late_delete", "unauthorized_high_adjustment"]


def test_bad_timezone_is_a_usage_error(audit_files):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["detect", "--input", str(audit_files["csv"]), "--timezone", "Bad/Zone"])


def test_unknown_output_suffix_is_a_usage_error(audit_files, tmp_path, capsys):
    out = tmp_path / "anomalies.txt"
    with pytest.raises(SystemExit) as exc:
        main(["detect", "--input", str(audit_files["csv"]), "--output", str(out)])
    assert exc.value.code == 2
    assert "--format" in capsys.readouterr().err
    assert not out.exists()

    assert main(["detect", "--input", str(audit_files["csv"]), "--output", str(out), "--format", "jsonl"]) == 0
    assert len(out.read_text(encoding="utf-8").splitlines()) == 2
