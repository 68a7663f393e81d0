#!/usr/bin/env python3
"""Practice Watchdog CLI

Command-line interface for scanning audit-log exports, listing the rule
registry, and serving the API.

Examples
--------
# Scan an export and save the findings feed
practice-watchdog detect --input data/auditlog.csv --output out/anomalies.jsonl

# Evaluate Friday afternoons in the practice's own timezone
practice-watchdog detect --input data/auditlog.json --timezone America/Chicago

# Serve FastAPI
practice-watchdog serve --port 8080 --config configs/practice.yaml
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import WatchdogSettings, load_config
from .detection import Anomaly, anomalies_to_frame, filter_by_severity, scan, summarize
from .detection.schemas import Severity
from .ingestion import read_audit_log
from .logging_setup import setup_logging
from .rules import describe_rules
from .utils import ensure_dir, resolve_timezone, save_json

LOGGER = logging.getLogger("practice_watchdog.cli")

OUTPUT_FORMATS = ("json", "jsonl", "csv")


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _settings(args: argparse.Namespace) -> WatchdogSettings:
    cfg = load_config(args.config) if getattr(args, "config", None) else load_config()
    if getattr(args, "timezone", None):
        cfg["timezone"] = args.timezone
    if getattr(args, "min_severity", None):
        cfg["min_severity"] = args.min_severity
    return WatchdogSettings.from_config(cfg)


def output_format(out_path: Path, fmt: Optional[str] = None) -> str:
    """Explicit format, else the output suffix, else json."""
    return (fmt or out_path.suffix.lstrip(".") or "json").lower()


def write_anomalies(anomalies: Sequence[Anomaly], out_path: Path, fmt: Optional[str] = None) -> str:
    """Write the findings feed as json, jsonl or csv; returns the format used."""
    kind = output_format(out_path, fmt)
    ensure_dir(out_path.parent)
    if kind == "json":
        save_json([a.model_dump(mode="json", by_alias=True) for a in anomalies], out_path)
    elif kind == "jsonl":
        with out_path.open("w", encoding="utf-8") as f:
            for a in anomalies:
                f.write(a.model_dump_json(by_alias=True) + "\n")
    elif kind == "csv":
        anomalies_to_frame(anomalies).to_csv(out_path, index=False)
    else:
        raise ValueError(f"Unsupported output format: {kind}")
    return kind


# ---------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------

def cmd_detect(args: argparse.Namespace) -> int:
    settings = _settings(args)
    records = read_audit_log(Path(args.input), fmt=args.input_format)

    result = scan(records, overrides=settings.rule_overrides, tz=settings.timezone)
    anomalies = filter_by_severity(result.anomalies, settings.min_severity)

    summary: Dict[str, Any] = summarize(result)
    summary["reported"] = len(anomalies)
    if args.output:
        out_path = Path(args.output)
        summary["format"] = write_anomalies(anomalies, out_path, args.format)
        summary["output"] = str(out_path)
    else:
        summary["anomalies"] = [a.model_dump(mode="json", by_alias=True) for a in anomalies]
    if result.rejected:
        summary["rejected_entries"] = [r.model_dump() for r in result.rejected]

    print(json.dumps(summary, ensure_ascii=False))

    if args.strict and not result.ok:
        LOGGER.error("%d entries could not be evaluated", len(result.rejected))
        return 1
    return 0


def cmd_rules(args: argparse.Namespace) -> int:
    print(json.dumps(describe_rules(), ensure_ascii=False, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from .api.app import create_app

    cfg = load_config(args.config) if args.config else load_config()
    app = create_app(cfg)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.uvicorn_log_level)
    return 0


# ---------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------

def _timezone_arg(value: str) -> str:
    try:
        resolve_timezone(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="practice-watchdog", description="Practice Watchdog CLI")
    p.add_argument("--log-level", default=None, help="Root log level (default: env or INFO)")
    sub = p.add_subparsers(dest="cmd", required=True)

    # detect
    pd_ = sub.add_parser("detect", help="Scan an audit-log export for anomalies")
    pd_.add_argument("--input", required=True, help="Audit-log file (.csv, .json, .jsonl)")
    pd_.add_argument("--input-format", choices=["csv", "json", "jsonl"], default=None)
    pd_.add_argument("--output", default=None, help="Write anomalies here instead of stdout")
    pd_.add_argument("--format", choices=OUTPUT_FORMATS, default=None)
    pd_.add_argument("--config", default=None, help="YAML/JSON config file")
    pd_.add_argument("--timezone", type=_timezone_arg, default=None, help="Practice timezone (IANA)")
    pd_.add_argument("--min-severity", choices=[s.value for s in Severity], default=None)
    pd_.add_argument("--strict", action="store_true", help="Exit 1 if any entry was rejected")
    pd_.set_defaults(func=cmd_detect)

    # rules
    pr = sub.add_parser("rules", help="List registered rules in evaluation order")
    pr.set_defaults(func=cmd_rules)

    # serve
    pv = sub.add_parser("serve", help="Serve FastAPI app")
    pv.add_argument("--host", default="127.0.0.1")
    pv.add_argument("--port", type=int, default=8000)
    pv.add_argument("--config", default=None)
    pv.add_argument("--uvicorn-log-level", default="info")
    pv.set_defaults(func=cmd_serve)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "output", None) and output_format(Path(args.output), args.format) not in OUTPUT_FORMATS:
        parser.error(f"cannot infer output format from {args.output}; pass --format {{json,jsonl,csv}}")
    setup_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
