"""Structured logging and OpenTelemetry spans for floe-sass.

This module provides:
- configure_logging(): Opt-in structlog setup for hosts without their own
- span(): OpenTelemetry span around one compilation step

Without an OpenTelemetry SDK installed the spans are no-ops, so the plugin
can always wrap its compiler call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from floe_sass.errors import SassCompileError

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

TRACER_NAME = "floe.sass"


def get_logger() -> BoundLogger:
    """Logger used for span events."""
    return structlog.get_logger(TRACER_NAME)


def get_tracer() -> Tracer:
    """OpenTelemetry tracer for floe-sass."""
    from floe_sass import __version__

    return trace.get_tracer(TRACER_NAME, __version__)


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Route floe-sass log events through the stdlib logging backend.

    Nothing is configured on import; hosts that already configure structlog
    should not call this.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_format: Render JSON lines instead of the console format.
        add_timestamp: Prefix every event with an ISO timestamp.

    Raises:
        ValueError: If log_level is not a known level name.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {log_level}"
        raise ValueError(msg)

    processors: list[Any] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level)


@contextmanager
def span(name: str, *, attributes: dict[str, Any] | None = None) -> Iterator[Span]:
    """Trace a compilation step.

    Emits ``<name>_started`` (debug), ``<name>_completed`` (info) and
    ``<name>_failed`` log events. Compiler errors additionally record their
    line and column on the span. The exception is re-raised.

    Args:
        name: Span name, e.g. "sass.compile".
        attributes: Span attributes, also bound to the log events.

    Example:
        >>> with span("sass.compile", attributes={"sass.file": "button.scss"}):
        ...     result = await compiler.render(options)
    """
    attrs = dict(attributes or {})
    log = get_logger().bind(**attrs)

    with get_tracer().start_as_current_span(name, attributes=attrs) as current:
        log.debug(f"{name}_started")
        try:
            yield current
        except Exception as e:
            if isinstance(e, SassCompileError):
                if e.line is not None:
                    current.set_attribute("sass.error.line", e.line)
                if e.column is not None:
                    current.set_attribute("sass.error.column", e.column)
            current.set_status(Status(StatusCode.ERROR, str(e)))
            current.record_exception(e)
            log.error(f"{name}_failed", error=str(e), error_type=type(e).__name__)
            raise
        current.set_status(Status(StatusCode.OK))
        log.info(f"{name}_completed")
