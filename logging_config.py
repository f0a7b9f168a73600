"""Logging for the CRM API.

Console output is human readable; when a log directory is configured the
same records are also written as JSON lines to a rotating file.

Usage:
    from logging_config import get_logger, setup_logging

    setup_logging()  # once, at application startup
    logger = get_logger(__name__)

    logger.info("Prospect created", extra={"context": {"prospect_id": 12}})
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, Union

ROOT_LOGGER = "crm"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for file output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context"):
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable format for console output."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S")
        message = record.getMessage()

        if getattr(record, "context", None):
            ctx_parts = [f"{k}={v}" for k, v in record.context.items()]
            message += f" [{', '.join(ctx_parts)}]"

        line = f"{timestamp} {record.levelname:<7s} {record.name}: {message}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


_logging_initialized = False


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[Path] = None,
) -> None:
    """Initialize the ``crm`` logger hierarchy.

    Safe to call more than once; only the first call installs handlers.

    Args:
        level: Minimum level for console output
        log_dir: Directory for the rotating JSON log file. No file is
            written when omitted.
    """
    global _logging_initialized

    if _logging_initialized:
        return

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "crm.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    _logging_initialized = True
    root_logger.debug(
        "Logging initialized",
        extra={"context": {"log_dir": str(log_dir) if log_dir else None}},
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``crm`` hierarchy (typically for ``__name__``)."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
