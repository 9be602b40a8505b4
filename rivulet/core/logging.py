"""Structured JSON logging for Rivulet."""

import json
import logging
from datetime import UTC, datetime
from typing import Any

# Dynamically derive standard LogRecord attributes at module import time
# This ensures future Python additions (like taskName) are automatically handled
_STANDARD_LOGRECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
    ).__dict__.keys()
)

ROOT_LOGGER = "rivulet"


class JSONFormatter(logging.Formatter):
    """JSON formatter with UTC ISO8601 timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Standard Rivulet fields first so they keep a stable position
        for field in ("stream", "producer", "kind", "operator", "strategy"):
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        for key, value in vars(record).items():
            if key not in _STANDARD_LOGRECORD_KEYS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)

        try:
            return json.dumps(log_data, default=str)
        except Exception:
            return str(log_data)


def _setup_json_handler(logger: logging.Logger, level: int) -> None:
    """Configure a logger with JSON formatting.

    Args:
        logger: The logger to configure.
        level: The logging level to set.
    """
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Install JSON formatting on the ``rivulet`` logger and return it.

    Library modules log through child loggers (``rivulet.stream``,
    ``rivulet.producer``...), which propagate here.

    Args:
        level: The logging level to set. Defaults to logging.INFO.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    _setup_json_handler(logger, level)
    return logger


def get_logger(name: str = ROOT_LOGGER, level: int | None = None) -> logging.Logger:
    """Get a Rivulet logger.

    Child loggers inherit formatting from the ``rivulet`` logger. Passing
    ``level`` gives the logger its own JSON handler at that level.

    Args:
        name: The logger name. Defaults to "rivulet".
        level: Optional logging level for a standalone JSON handler.
    """
    logger = logging.getLogger(name)
    if level is not None:
        _setup_json_handler(logger, level)
    return logger
