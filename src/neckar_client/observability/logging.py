"""structlog setup for the client and the ``neckar`` CLI."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars, unbind_contextvars

if TYPE_CHECKING:
    from neckar_core.config.settings import Settings

IDENTITY_KEYS = ("cluster", "subject")
QUIET_LOGGERS = ("httpx", "httpcore", "hvac", "urllib3")


def configure_logging(settings: Settings, stream: TextIO | None = None) -> None:
    """Send client and library log records to ``stream`` (stderr by default).

    stdout is left alone so CLI output such as a token can be piped.
    """
    stream = stream or sys.stderr
    shared_processors: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    level = _resolve_level(settings.log_level)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # hvac and httpx log request lines that may carry vault paths
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_identity_context(cluster: str | None = None, subject: str | None = None) -> None:
    """Tag subsequent log entries with the cluster and subject acted for."""
    context = {k: v for k, v in zip(IDENTITY_KEYS, (cluster, subject), strict=True) if v}
    if context:
        bind_contextvars(**context)


def clear_identity_context() -> None:
    """Drop the identity tags, leaving other bound context untouched."""
    unbind_contextvars(*IDENTITY_KEYS)


def _resolve_level(level_name: str) -> int:
    return logging.getLevelNamesMapping().get(level_name.upper(), logging.INFO)
