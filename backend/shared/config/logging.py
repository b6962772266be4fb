"""
Structured logging for the POS back-office API.

Every logger accepts keyword arguments as structured data:

    logger.info("Backup created", reference="BKP-240105-1234", size_bytes=2048)

Production writes one JSON object per line; development writes a coloured,
human readable line. Both carry the request id of the HTTP request that
produced the record.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdFilter

SERVICE_NAME = "pos-api"


def _request_id(record: logging.LogRecord) -> str | None:
    request_id = getattr(record, "request_id", None)
    return request_id if request_id and request_id != "-" else None


def _data(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "data", None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON document per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = _request_id(record)
        if request_id:
            entry["request_id"] = request_id
        data = _data(record)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if settings.debug:
            entry["source"] = f"{record.pathname}:{record.lineno} in {record.funcName}"
        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Coloured single-line output for local runs."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        parts = [f"{color}{clock} {record.levelname:<8}{self.RESET}"]

        request_id = _request_id(record)
        if request_id:
            parts.append(f"{self.DIM}{request_id[:8]}{self.RESET}")
        parts.append(f"{record.name}: {record.getMessage()}")

        data = _data(record)
        if data:
            parts.append(" ".join(f"{key}={value!r}" for key, value in data.items()))

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """
    Logger whose methods take arbitrary keyword arguments.

    Keywords the standard logger understands (exc_info, extra, stack_info,
    stacklevel) keep their meaning; everything else is attached to the
    record as ``record.data``.
    """

    def _log(
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: dict[str, Any] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **data: Any,
    ) -> None:
        extra = dict(extra or {})
        extra["data"] = data or None
        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )


logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """
    Configure the root logger. Call once at application startup.
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        StructuredFormatter() if settings.environment == "production" else DevelopmentFormatter()
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for noisy, noisy_level in (
        ("uvicorn.access", logging.WARNING),
        ("sqlalchemy.engine", logging.WARNING),
        ("httpx", logging.WARNING),
    ):
        logging.getLogger(noisy).setLevel(noisy_level)


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Backup created", reference="BKP-240105-1234", size_bytes=2048)
        logger.error("Restore failed", backup_id=backup_id, exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def mask_email(email: str | None) -> str:
    """Keep the first two characters of the local part: "ow***@shop.com"."""
    if not email or "@" not in email:
        return "<no-email>"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


pos_api_logger = get_logger("pos_api")
maintenance_logger = get_logger("pos_api.maintenance")
backup_logger = get_logger("pos_api.backup")

# Destructive operations are written here, separate from application logs
security_audit_logger = get_logger("security.audit")


def audit_maintenance_event(
    event_type: str,
    user_id: str | None = None,
    email: str | None = None,
    success: bool = True,
    reason: str | None = None,
    **context: Any,
) -> None:
    """
    Record who ran a destructive maintenance operation and how it ended.

    Args:
        event_type: RESET, FACTORY_RESET, RESTORE, IMPORT or BACKUP_DELETE
        user_id: Acting user, from the token subject
        email: Acting user's email; masked before it is written
        success: False for attempts that were refused
        reason: Why the attempt was refused
        **context: Operation details (scope, backup id, row counts)
    """
    security_audit_logger.log(
        logging.INFO if success else logging.WARNING,
        "Maintenance %s %s",
        event_type,
        "completed" if success else "refused",
        event_type=event_type,
        user_id=user_id,
        email=mask_email(email) if email else None,
        success=success,
        reason=reason,
        **context,
    )
