"""
Structured logging for the back office API.

Every log line is a structlog event. Lines emitted while serving a request
carry the request ID and, when the client identifies itself with
``X-Dealer-ID``, the acting dealer. Development gets the coloured console
renderer; test and production emit one JSON object per line.
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional
from uuid import uuid4

import structlog
from structlog.types import EventDict, Processor

from dealerhub.core.config import get_settings

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")
dealer_id_ctx: ContextVar[Optional[str]] = ContextVar("dealer_id", default=None)

# operations slower than this are logged as warnings
SLOW_OPERATION_MS = 500

# third-party loggers kept below the application level
_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "botocore": logging.WARNING,
    "boto3": logging.WARNING,
    "passlib": logging.ERROR,
}


def add_correlation_ids(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Copy the request and dealer IDs of the current request onto the event."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    dealer_id = dealer_id_ctx.get()
    if dealer_id:
        event_dict.setdefault("dealer_id", dealer_id)
    return event_dict


def _renderer(development: bool) -> Processor:
    if development:
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.JSONRenderer()


def configure_logging() -> None:
    """Install the structlog pipeline and route it through stdlib logging."""
    settings = get_settings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            add_correlation_ids,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(settings.is_development),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind the request ID used to correlate log lines and error bodies.

    Args:
        request_id: ID sent by the client; a UUID is generated when missing

    Returns:
        The request ID now in effect
    """
    request_id = request_id or str(uuid4())
    request_id_ctx.set(request_id)
    return request_id


def get_request_id() -> str:
    return request_id_ctx.get()


def set_dealer_id(dealer_id: Optional[str]) -> None:
    dealer_id_ctx.set(dealer_id)


def clear_context() -> None:
    """Forget the correlation IDs once a request has been answered."""
    request_id_ctx.set("")
    dealer_id_ctx.set(None)


@contextmanager
def log_performance(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    **context: Any,
) -> Iterator[None]:
    """
    Time a block and log its duration.

    Failures are logged with the exception type and re-raised; slow blocks
    are logged as warnings.

    Example:
        >>> with log_performance(logger, "order_delivery", order_id=order_id):
        ...     await service.mark_as_delivered(order_id)
    """
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(
            "Operation failed",
            operation=operation,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            error_type=type(e).__name__,
            **context,
        )
        raise

    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    log = logger.warning if duration_ms > SLOW_OPERATION_MS else logger.info
    log("Operation completed", operation=operation, duration_ms=duration_ms, **context)
