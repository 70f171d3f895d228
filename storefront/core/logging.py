"""
storefront/core/logging.py

Purpose: Logging configuration

- JSON lines in production, coloured single lines in development
- Request-scoped context (user_id, order_id, product_id) via contextvars
- Quiets chatty driver / HTTP client loggers
"""

import logging
import sys
import json
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

from storefront.core.config import settings

# Record attributes copied into structured output when present
CONTEXT_FIELDS = ("user_id", "order_id", "product_id", "method", "path", "process_time")

# Short labels used by the development formatter
CONTEXT_LABELS = {"user_id": "user", "order_id": "order", "product_id": "product"}

NOISY_LOGGERS = ("httpx", "httpcore", "motor", "pymongo", "urllib3", "uvicorn.access")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("storefront_log_context", default={})


class ContextFilter(logging.Filter):
    """
    Copies the active LogContext values onto every record. Values passed
    explicitly through ``extra=`` win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line for log shipping in production.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        log_data.update({
            field: getattr(record, field)
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        })

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}[{timestamp}] {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        tags = [
            f"{label}={getattr(record, field)}"
            for field, label in CONTEXT_LABELS.items()
            if getattr(record, field, None)
        ]
        if tags:
            line += f" [{' '.join(tags)}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def setup_logging() -> logging.Logger:
    """
    Configures the root logger once at startup.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if settings.is_production else DevelopmentFormatter())
    handler.addFilter(ContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("storefront")
    logger.info(f"Logging configured ({settings.ENVIRONMENT}, level {settings.LOG_LEVEL})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Returns a logger namespaced under ``storefront``.
    """
    if name.startswith("storefront"):
        return logging.getLogger(name)
    return logging.getLogger(f"storefront.{name}")


class LogContext:
    """
    Attaches context to every record logged inside the block. Scoped to the
    current task, so concurrent requests never see each other's values.

    Usage:
        with LogContext(user_id="665f...", order_id="6660..."):
            logger.info("Order placed")
    """

    def __init__(self, **kwargs):
        self.context = {key: value for key, value in kwargs.items() if value is not None}
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
