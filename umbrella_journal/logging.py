"""Structured logging setup using structlog.

The parser core only *emits* events; configuring where they go is left to
the process entry point.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import TextIO

import structlog

from .config import ParserConfig


def setup_logging(
    *,
    json: bool = True,
    level: str = "INFO",
    stream: TextIO | None = None,
    quiet: Iterable[str] = (),
) -> None:
    """Configure structlog and the stdlib root logger.

    Parameters
    ----------
    json:
        Render JSON lines when *True*, otherwise use the console renderer.
    level:
        Root log level name, case-insensitive (e.g. ``"debug"``).
    stream:
        Where log lines go.  Defaults to stderr so that parse results
        written to stdout stay machine-readable.
    quiet:
        Logger names capped at WARNING, e.g.
        :data:`umbrella_journal.text_extraction.HTTP_LOGGERS` for processes
        that run the text extraction client.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging_from_config(config: ParserConfig, *, stream: TextIO | None = None) -> None:
    """Configure logging from the ``JOURNAL_LOG_*`` settings."""
    setup_logging(json=config.log_json, level=config.log_level, stream=stream)
