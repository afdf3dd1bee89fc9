"""Logging setup for the assetgraph CLI and services.

Services log through plain ``logging.getLogger(__name__)``; telemetry logs
through structlog. Both end up in one stderr handler, rendered as console
lines or, with ``--log-json``, one JSON object per line.

Every record carries the ``command`` bound by :func:`bind_command` (for
example ``rel add``), so history and lock warnings can be traced back to
the invocation that produced them.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Chatty third-party loggers held at WARNING even in verbose mode.
_QUIET_LOGGERS = ("sqlalchemy", "pluggy")


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(log_json: bool) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler; safe to call more than once per process.

    ``assetgraph.*`` loggers emit DEBUG when *verbose*, WARNING otherwise.
    """
    structlog.configure(
        processors=[*_processors(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(log_json))
    root.setLevel(logging.WARNING)

    logging.getLogger("assetgraph").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_command(command: str | None) -> None:
    """Tag subsequent log records with the CLI command being run."""
    structlog.contextvars.clear_contextvars()
    if command:
        structlog.contextvars.bind_contextvars(command=command)
