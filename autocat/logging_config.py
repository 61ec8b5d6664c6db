"""
Logging setup for autocat.

Every logger hangs off the "autocat" logger so a single configure_logging()
call decides the output format. Records carry the correlation ID of the
request being categorized.

Usage:
    from autocat.logging_config import get_logger
    logger = get_logger(__name__)
"""

import json
import logging
import os
import re
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone

ROOT_LOGGER_NAME = "autocat"
CORRELATION_HEADER = "x-correlation-id"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Correlation ID of the current request, or "" outside a request."""
    return _correlation_id.get()


def set_correlation_id(cid: str) -> Token:
    """Bind a correlation ID; pass the returned token to reset_correlation_id()."""
    return _correlation_id.set(cid)


def reset_correlation_id(token: Token) -> None:
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def is_production() -> bool:
    """APP_ENV=production switches to JSON logs and sanitized error bodies."""
    return os.environ.get("APP_ENV", "development").lower() == "production"


# Provider errors (detector, transcriber) may echo request URLs or headers
_CREDENTIAL = re.compile(
    r"((?:api[_-]?key|access[_-]?token)\s*[:=]\s*|Bearer\s+)['\"]?[\w\-\.]{8,}['\"]?",
    re.IGNORECASE,
)


def redact(message: str) -> str:
    return _CREDENTIAL.sub(r"\1[REDACTED]", message)


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class StructuredJsonFormatter(logging.Formatter):
    """One JSON object per line.

    Fields: timestamp, level, service, context (logger name), correlationId,
    message, plus stackTrace for exceptions and `data` when a record is
    logged with extra={"data": {...}}.
    """

    def __init__(self, service: str = ROOT_LOGGER_NAME):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _timestamp(record).isoformat(),
            "level": "warn" if record.levelno == logging.WARNING else record.levelname.lower(),
            "service": self.service,
            "context": record.name,
            "correlationId": get_correlation_id() or None,
            "message": redact(record.getMessage()),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["stackTrace"] = redact(self.formatException(record.exc_info))
        data = getattr(record, "data", None)
        if isinstance(data, dict):
            entry["data"] = data
        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Tab separated lines: level, time, logger [short correlation id], message."""

    def format(self, record: logging.LogRecord) -> str:
        cid = get_correlation_id()
        name = f"{record.name} [{cid[:8]}]" if cid else record.name
        line = "\t".join([
            f"{record.levelname}:",
            _timestamp(record).strftime("%Y-%m-%d %H:%M:%S"),
            name,
            redact(record.getMessage()),
        ])
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + redact(self.formatException(record.exc_info))
        return line


_configured = False


def configure_logging(
    log_level: str = "INFO",
    service: str = ROOT_LOGGER_NAME,
    log_file: str = "",
) -> None:
    """Install handlers on the "autocat" logger.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service: Service name written into JSON entries
        log_file: When set, JSON lines are appended to this file as well
    """
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.propagate = False

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        StructuredJsonFormatter(service) if is_production() else DevelopmentFormatter()
    )
    root.addHandler(console)

    if log_file:
        try:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            root.warning(f"Could not open log file {log_file}: {e}")
        else:
            file_handler.setFormatter(StructuredJsonFormatter(service))
            root.addHandler(file_handler)

    _configured = True


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Logger under "autocat"; names outside the package are nested below it."""
    if not _configured:
        configure_logging()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
