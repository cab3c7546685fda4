"""Logging setup: structlog events and stdlib records share one stdout handler."""

import logging
import sys

import structlog
from asgi_correlation_id.context import correlation_id

# Chatty per-request loggers, raised to WARNING
QUIET_LOGGERS = ("uvicorn.access", "httpx", "stripe")


def add_correlation_id(logger, method, event_dict):
    """Tag each entry with the current request's X-Request-ID."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def configure_logging(debug: bool = False) -> None:
    """Send structlog and stdlib logging through one renderer on stdout.

    Debug mode renders console lines at DEBUG. Otherwise each entry is one
    JSON object at INFO, with tracebacks flattened into ``exception``.
    Must run before any module binds a structlog logger: loggers are cached
    on first use.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if debug:
        render = [structlog.dev.ConsoleRenderer()]
    else:
        render = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
