"""
Backoff Logging
===============
Structured logging setup for services embedding the backoff executors.

Usage:
    from backoff_core.log import setup_logging

    setup_logging(service_name="uploader")

Every executor logs through structlog with snake_case event names and
binds a ``call_id`` so all lines of one logical call can be grouped.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

import structlog

service_name_var: ContextVar[str] = ContextVar("service_name", default="unknown")


class JSONFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": service_name_var.get(),
        }

        # structlog hands over its event dict as the message
        if isinstance(record.msg, dict):
            log_data.update(record.msg)
        else:
            log_data["event"] = record.getMessage()

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, default=str)


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> logging.Logger:
    """
    Configure stdlib logging and route structlog through it.

    Args:
        service_name: Name added to every JSON line
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines when True, console rendering otherwise

    Returns:
        Configured root logger
    """
    service_name_var.set(service_name)
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
    ]
    if json_output:
        handler.setFormatter(JSONFormatter())
        processors.append(structlog.processors.format_exc_info)
        # Leave the event dict intact for JSONFormatter
        processors.append(lambda _, __, event_dict: {"msg": event_dict})
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    root_logger.addHandler(handler)

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).info("logging_configured", service=service_name)
    return root_logger


def new_call_id() -> str:
    """Short random id tagging one logical call."""
    return uuid.uuid4().hex[:12]
