"""
Logging setup: console output plus an optional rotating JSON-lines file.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from jobsift.config import Settings

LOGGER_NAME = "jobsift"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, caller, msg."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "caller": f"{record.module}:{record.lineno}",
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["stacktrace"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _level(name: str) -> int:
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: "Settings", level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return the package logger.

    Handlers are replaced on every call, so configuring twice does not
    duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(level or settings.log_level))
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(
        "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(console)

    if settings.logs_file_enabled:
        os.makedirs(os.path.dirname(settings.logs_path) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.logs_path,
            maxBytes=settings.logs_max_size_mb * 1024 * 1024,
            backupCount=settings.logs_max_backups,
            encoding="utf-8",
        )
        file_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(file_handler)

    return logger
