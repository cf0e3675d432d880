"""
Structured Logging - structlog setup for the bridge.

Every entry carries the service name and version; entries logged while a
method call is in flight also carry its method and call id.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from purchases_bridge.config import settings

# Request lines are already logged by the HTTP middleware
QUIET_LOGGERS = ("uvicorn.access",)


def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["service"] = settings.service_name
    event_dict["version"] = settings.api_version
    event_dict["channel"] = settings.channel_name
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog over the stdlib root logger.

    A JSON entry for a forwarded call looks like:
    {
        "event": "method_call_completed",
        "level": "info",
        "timestamp": "2025-01-08T12:00:00.123456Z",
        "logger": "purchases_bridge.services.plugin",
        "service": "purchases-bridge",
        "version": "0.1.0",
        "channel": "purchases_flutter",
        "method": "getPurchaserInfo",
        "call_id": "4b1d...",
        "outcome": "success"
    }
    """
    level = getattr(logging, settings.log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)  # type: ignore[no-any-return]


class log_context:
    """
    Bind call-scoped fields for every log entry inside the block.

    Usage:
        with log_context(method="identify", call_id=call_id):
            logger.info("forwarding_call")
    """

    def __init__(self, **fields: Any) -> None:
        self.fields = fields

    def __enter__(self) -> None:
        structlog.contextvars.bind_contextvars(**self.fields)

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.fields)
