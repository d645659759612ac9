"""
Local structured logging.

Every manager operation logs what it did (or why it refused) as a
JSON line. Related lines share a correlation id bound through
structlog's contextvars, so one user action can be followed end to end.

There is no persisted audit trail: logs go to stdout only.
"""

import logging
import sys
from uuid import uuid4

import structlog


structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stdout at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


def get_logger(name: str = "tracker") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def create_correlation_id() -> str:
    """
    Create a new correlation ID for tracking related log lines.

    Use this at the start of a user action and bind it with
    structlog.contextvars.bound_contextvars(correlation_id=...).
    """
    return uuid4().hex
