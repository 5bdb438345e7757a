"""Structured logging for the order desk.

Every desk event (order_created, order_transitioned, order_rejected, ...)
is a structlog entry. Entries emitted while a submission is in flight
carry that order's id as ``correlation_id``, so one order's lifecycle
can be pulled out of an interleaved log. When a desk name is configured
it is stamped on every entry as ``desk``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

# Order id of the submission currently being driven, "" outside one
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def set_correlation_id(cid: str) -> None:
    _correlation_id.set(cid)


def get_correlation_id() -> str:
    """Order id bound to the current task, or "" if none."""
    return _correlation_id.get()


@contextmanager
def correlation_scope(order_id: str) -> Iterator[None]:
    """Tag every log entry inside the block with ``order_id``.

    Scoped per asyncio task, so concurrent submissions do not see each
    other's ids. The previous value is restored on exit.
    """
    token = _correlation_id.set(order_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


def _add_correlation_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    order_id = get_correlation_id()
    if order_id:
        event_dict.setdefault("correlation_id", order_id)
    return event_dict


def _desk_stamper(desk_name: str) -> structlog.types.Processor:
    def add_desk(
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict.setdefault("desk", desk_name)
        return event_dict

    return add_desk


def setup_logging(
    level: str = "INFO",
    log_format: str = "console",
    desk_name: str | None = None,
) -> None:
    """Route structlog through the stdlib root logger on stderr.

    stdout stays free for command output (``tradeflow validate --json``).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for one object per line, "console" for the
            interactive desk.
        desk_name: Stamped on every entry as ``desk`` when given.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_correlation_id,
    ]
    if desk_name:
        shared_processors.append(_desk_stamper(desk_name))
    shared_processors += [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    # Not cached: tests and the CLI reconfigure per invocation
    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
