"""
Structured logging for the pop-up queue backend.

Every logger is a StructuredLogger, so call sites pass context as keyword
arguments:

    logger.info("Order assigned", order_id=12, user_id=3)

Production writes one JSON object per line; other environments get a
colored single-line format. Both include the X-Request-ID of the request
being served.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings

SERVICE_NAME = "popup-queue"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def _request_id(record: logging.LogRecord) -> str | None:
    request_id = getattr(record, "request_id", None)
    if request_id and request_id != "-":
        return request_id
    return None


def _context(record: logging.LogRecord) -> dict[str, Any] | None:
    return getattr(record, "extra_data", None) or None


class StructuredFormatter(logging.Formatter):
    """JSON lines for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "env": settings.environment,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = _request_id(record)
        if request_id:
            entry["request_id"] = request_id

        context = _context(record)
        if context:
            entry["data"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            entry["source"] = f"{record.filename}:{record.lineno}"

        return json.dumps(entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Colored one-liners: time, level, request id, logger, message, context."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, self.RESET)
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        parts = [f"{color}[{clock}] {record.levelname:8}{self.RESET}"]
        request_id = _request_id(record)
        if request_id:
            parts.append(f"{self.DIM}[{request_id[:8]}]{self.RESET}")
        parts.append(f"{record.name}: {record.getMessage()}")

        line = " ".join(parts)
        context = _context(record)
        if context:
            line += " (" + " | ".join(f"{k}={v}" for k, v in context.items()) + ")"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """Logger whose level methods accept keyword context."""

    def _log_with_data(
        self,
        level: int,
        msg: str,
        args: tuple,
        exc_info: Any = None,
        **context: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        super()._log(level, msg, args, exc_info=exc_info, extra={"extra_data": context or None})

    def debug(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **context)

    def info(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **context)

    def warning(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **context)

    def error(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.ERROR, msg, args, **context)

    def critical(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.CRITICAL, msg, args, **context)


logging.setLoggerClass(StructuredLogger)


def resolve_log_level() -> int:
    """LOG_LEVEL when set and valid, otherwise DEBUG in debug mode and INFO elsewhere."""
    if settings.log_level:
        level = logging.getLevelName(settings.log_level.upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if settings.debug else logging.INFO


def setup_logging() -> None:
    """Install the stdout handler on the root logger. Call once at startup."""
    # Import here to avoid circular imports
    from shared.infrastructure.correlation import CorrelationIdFilter

    level = resolve_log_level()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    if settings.environment == "production":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, noisy_level))


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("Menu item created", item_id=4, price_cents=450)
    """
    return logging.getLogger(name)  # type: ignore


def mask_email(email: str | None) -> str:
    """"barista@example.com" -> "ba***@example.com"."""
    if not email:
        return "<no-email>"
    local, sep, domain = email.partition("@")
    if not sep or not local:
        return "***@invalid"
    return f"{local[:2]}***@{domain}"


def mask_phone(phone: str | None) -> str:
    """Keep the last 4 digits of a phone number."""
    if not phone:
        return "<no-phone>"
    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) <= 4:
        return "***"
    return f"***{digits[-4:]}"


# Named loggers per area
rest_api_logger = get_logger("rest_api")
public_logger = get_logger("rest_api.public")
orders_logger = get_logger("rest_api.orders")
sessions_logger = get_logger("rest_api.sessions")
menu_logger = get_logger("rest_api.menu")
auth_logger = get_logger("rest_api.auth")

security_audit_logger = get_logger("security.audit")


def audit_auth_event(
    event_type: str,
    user_id: int | str | None = None,
    email: str | None = None,
    success: bool = True,
    reason: str | None = None,
    ip_address: str | None = None,
    **extra: Any,
) -> None:
    """
    Record a security event (LOGIN, SIGNUP, INVITE_CREATED, OWNER_CREATED).

    Failures log at WARNING. Emails are masked.
    """
    security_audit_logger._log_with_data(
        logging.INFO if success else logging.WARNING,
        f"AUTH_AUDIT: {event_type}",
        (),
        event_type=event_type,
        user_id=user_id,
        email=mask_email(email) if email else None,
        success=success,
        reason=reason,
        ip_address=ip_address,
        **extra,
    )
