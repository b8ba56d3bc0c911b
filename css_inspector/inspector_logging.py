"""Centralized logging configuration for css-inspector.

The analysis core only ever asks for loggers; handlers are installed by the
command line entry point (or by the embedding application) through
``setup_logging``.

- Text or structured JSON output
- Optional rotating log file
- Category loggers for the analyzer, detectors, fix engine and CLI
"""

import json
import logging
import logging.config
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

ROOT_LOGGER_NAME = "css_inspector"


class LogCategory(Enum):
    """Log categories for the analysis pipeline."""

    ANALYZER = "analyzer"
    DETECTORS = "detectors"
    FIXES = "fixes"
    CLI = "cli"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Produces one JSON object per record with consistent fields and the
    pipeline extras (timings, counts, detector names) when present.
    """

    EXTRA_FIELDS = (
        "duration_ms",
        "operation",
        "file_path",
        "detector",
        "issue_count",
        "issue_id",
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string representation of the log entry.
        """
        log_entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    level: str = "INFO",
    quiet: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
    log_format: str = "text",
    rotation_count: int = 3,
    max_bytes: int = 10485760,
) -> logging.Logger:
    """Configure the ``css_inspector`` logger hierarchy.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR).
        quiet: Suppress console output below ERROR.
        verbose: Enable debug-level console output.
        log_file: Optional log file; enables a rotating file handler.
        log_format: "text" or "json" for the file handler and, with json,
            the console handler too.
        rotation_count: Number of rotated backups to keep.
        max_bytes: Max file size before rotation.

    Returns:
        The configured root package logger.
    """
    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"
    else:
        effective_level = level.upper()

    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {"format": "%(levelname)s | %(message)s"},
            "json": {
                "()": JSONFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if log_format == "json" else "simple",
                "level": effective_level,
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            ROOT_LOGGER_NAME: {
                "handlers": ["console"],
                "level": "DEBUG",
                "propagate": False,
            }
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json" if log_format == "json" else "detailed",
            "level": "DEBUG",
            "filename": str(log_file),
            "maxBytes": max_bytes,
            "backupCount": rotation_count,
        }
        config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_logger() -> logging.Logger:
    """Get the package logger."""
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_category_logger(category: LogCategory) -> logging.Logger:
    """Get a logger for a specific pipeline stage.

    Args:
        category: The log category (ANALYZER, DETECTORS, FIXES, CLI).

    Returns:
        Logger instance for the category.

    Example:
        >>> from css_inspector.inspector_logging import get_category_logger, LogCategory
        >>> logger = get_category_logger(LogCategory.FIXES)
        >>> logger.debug("Applied 3 fixes")
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{category.value}")
