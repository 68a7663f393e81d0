"""Centralized logging setup for Practice Watchdog.

Features:
- INFO level console output by default
- Optional JSON lines via env var `PRACTICE_WATCHDOG_LOG_JSON=1`
- Optional rotating file handler (`PRACTICE_WATCHDOG_LOG_FILE=...`)

Usage
-----
from practice_watchdog.logging_setup import setup_logging
setup_logging()  # call once at process start
"""
from __future__ import annotations

import json
import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _env_flag(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def setup_logging(
    *,
    level: str | int | None = None,
    json_logs: Optional[bool] = None,
    log_file: str | Path | None = None,
    file_max_bytes: int = 5 * 1024 * 1024,
    file_backup_count: int = 3,
) -> Dict[str, Any]:
    """Configure root logging and return the dictConfig that was applied."""
    if level is None:
        level = os.getenv("PRACTICE_WATCHDOG_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.upper()
    if json_logs is None:
        json_logs = _env_flag("PRACTICE_WATCHDOG_LOG_JSON")
    if log_file is None:
        log_file = os.getenv("PRACTICE_WATCHDOG_LOG_FILE") or None

    formatter = "json" if json_logs else "console"
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": formatter,
            "stream": "ext://sys.stderr",
        }
    }

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": formatter,
            "filename": str(log_path),
            "maxBytes": file_max_bytes,
            "backupCount": file_backup_count,
            "encoding": "utf-8",
        }

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": DEFAULT_FMT, "datefmt": DEFAULT_DATEFMT},
            "json": {"()": JsonFormatter},
        },
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
    }
    logging.config.dictConfig(config)
    return config
