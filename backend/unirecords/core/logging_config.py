"""
UniRecords logging.

Production writes one JSON object per line; every other environment gets a
readable line tagged with the request and user ids. Both carry the ids from
context variables set by the request middleware and auth dependency.
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional
from contextvars import ContextVar

from unirecords.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_user_id() -> str:
    return user_id_var.get()


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


# LogRecord attributes that are not `extra=` fields
_RECORD_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {
    'message', 'asctime', 'request_id', 'user_id',
}

# Never written out, even when passed through `extra=`
SENSITIVE_FIELDS = ('password', 'token', 'secret', 'authorization')

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024

READABLE_FORMAT = "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] %(message)s"


def redact(key: str, value: Any) -> Any:
    if any(marker in key.lower() for marker in SENSITIVE_FIELDS):
        return '***'
    return value


class JSONFormatter(logging.Formatter):
    """Structured lines for log aggregation"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if get_request_id():
            entry["request_id"] = get_request_id()
        if get_user_id():
            entry["user_id"] = get_user_id()

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith('_'):
                entry[key] = redact(key, value)

        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain text with request and user ids filled in"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'
        record.user_id = get_user_id() or '-'
        return super().format(record)


class RecordsLogger(logging.Logger):
    """Logger with helpers for the events this service emits"""

    def log_request(self, method: str, path: str, status_code: int, duration_ms: float,
                    level: int = logging.INFO, **kwargs) -> None:
        self.log(
            level,
            f"{method} {path} -> {status_code} ({duration_ms:.1f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        message = f"Auth {event} {'succeeded' if success else 'failed'}"
        if user_email:
            message += f" for {user_email}"
        if reason:
            message += f": {reason}"
        self.log(
            logging.INFO if success else logging.WARNING,
            message,
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_audit_event(self, action: str, resource: str,
                        resource_id: Optional[str] = None, **kwargs) -> None:
        """An audit row was persisted"""
        target = f"{resource}/{resource_id}" if resource_id else resource
        self.debug(
            f"Audit {action} {target}",
            extra={
                "event_type": "audit",
                "audit_action": action,
                "audit_resource": resource,
                "audit_resource_id": resource_id,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        self.error(
            f"{context or 'Unhandled'}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def _handlers(formatter: logging.Formatter, backup_count: int) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if settings.LOG_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=backup_count)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    return handlers


def setup_logging() -> RecordsLogger:
    logging.setLoggerClass(RecordsLogger)

    logger = logging.getLogger("unirecords")
    logger.__class__ = RecordsLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    if settings.is_production:
        handlers = _handlers(JSONFormatter(), backup_count=10)
    else:
        handlers = _handlers(ContextualFormatter(READABLE_FORMAT), backup_count=5)
    for handler in handlers:
        logger.addHandler(handler)

    for noisy in ("httpx", "uvicorn.access", "sqlalchemy.engine", "botocore", "aiosmtplib"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(f"Logging initialized ({settings.ENVIRONMENT}, level {settings.LOG_LEVEL})")
    return logger


logger: RecordsLogger = setup_logging()


__all__ = [
    'logger',
    'get_request_id',
    'set_request_id',
    'get_user_id',
    'set_user_id',
    'generate_request_id',
    'RecordsLogger',
]
