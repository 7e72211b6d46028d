"""Structured logging utilities."""

import logging
import logging.handlers
import json
import sys
from typing import Any, Optional
from datetime import datetime, timezone
from pathlib import Path


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        # Fields attached by LogContext or passed through extra=
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class DetailedFormatter(logging.Formatter):
    """Human-readable detailed formatter."""

    def __init__(self) -> None:
        fmt = (
            "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | "
            "%(message)s"
        )
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")


class SimpleFormatter(logging.Formatter):
    """Simple formatter for console output.

    Records logged inside a dry-run ``LogContext`` (``commit=False``) are
    prefixed with ``[dry-run]``.
    """

    def __init__(self) -> None:
        fmt = "%(levelname)-8s | %(name)s | %(message)s"
        super().__init__(fmt=fmt)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if getattr(record, "extra_fields", {}).get("commit") is False:
            return f"[dry-run] {text}"
        return text


def setup_logging(
    level: str = "INFO",
    format: str = "simple",
    log_file: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure logging.

    Console output goes to stderr so the run summary on stdout stays clean.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Format type (simple, detailed, json)
        log_file: Optional log file path
        max_file_size_mb: Max log file size in MB
        backup_count: Number of backup files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)

    if format == "json":
        console_handler.setFormatter(StructuredFormatter())
    elif format == "detailed":
        console_handler.setFormatter(DetailedFormatter())
    else:
        console_handler.setFormatter(SimpleFormatter())

    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )

        # Always use structured format for file logs
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)


class LogContext:
    """Context manager for adding structured fields to logs."""

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        self.logger = logger
        self.fields = fields
        self.old_factory = None

    def __enter__(self) -> "LogContext":
        self.old_factory = logging.getLogRecordFactory()

        def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = self.old_factory(*args, **kwargs)
            if not hasattr(record, "extra_fields"):
                record.extra_fields = {}
            record.extra_fields.update(self.fields)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        logging.setLogRecordFactory(self.old_factory)
