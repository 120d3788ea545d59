"""
NITP Student Portal - Logging

One ``portal`` logger for the whole service. Every record carries the id of
the HTTP request it belongs to and, once registration has created an
account, that account's id. Production writes JSON lines, everything else a
one-line text format.
"""

import logging
import sys
import json
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Dict, Optional
from contextvars import ContextVar

from portal.core.config import settings


_request_id: ContextVar[str] = ContextVar("request_id", default="")
_user_id: ContextVar[str] = ContextVar("user_id", default="")

# Keys a plain LogRecord already has; anything else came in through ``extra``
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "taskName"}


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def set_user_id(user_id: str) -> None:
    _user_id.set(user_id)


def request_context() -> Dict[str, str]:
    """Request and account ids of the current task, '-' when unset"""
    return {"request_id": _request_id.get() or "-", "user_id": _user_id.get() or "-"}


class ContextFilter(logging.Filter):
    """Stamp request_id / user_id onto every record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.__dict__.update(request_context())
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, ``extra`` fields inlined"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "function": record.funcName,
        }
        entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class PortalLogger(logging.Logger):
    """Logger with helpers for the events the portal reports"""

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        """Registration, confirmation and password request outcomes"""
        message = f"Auth {event}: {'success' if success else 'failed'}"
        if user_email:
            message += f" - {user_email}"
        if reason:
            message += f" - {reason}"

        self.log(
            logging.INFO if success else logging.WARNING,
            message,
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_http_request(self, method: str, path: str, status_code: int, duration_ms: float) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        self.log(
            level,
            f"{method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None, **kwargs) -> None:
        """Store and delivery failures; the traceback goes to the log only"""
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def setup_logging() -> PortalLogger:
    """Configure the ``portal`` logger from LOG_LEVEL / LOG_FILE / ENVIRONMENT"""
    logging.setLoggerClass(PortalLogger)
    logger = logging.getLogger("portal")
    logger.__class__ = PortalLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()
    logger.filters.clear()
    logger.addFilter(ContextFilter())

    if settings.ENVIRONMENT == "production":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | %(message)s"
        )

    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=10485760, backupCount=5))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger


logger: PortalLogger = setup_logging()
