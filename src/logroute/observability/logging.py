"""
logroute.observability.logging

structlog configuration shared by logroute's diagnostics and the stream sink.

Responsibilities:
- Build the processor chain (context merge, level, logger name, UTC timestamp, service).
- Render JSON for log shippers, or a console layout for local development.
- Provide a small wrapper for obtaining bound loggers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor


def shared_processors(service_name: str) -> list[Processor]:
    # Order matters: the renderer appended by `configure_logging` must run last.
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service_name(service_name),
        structlog.processors.dict_tracebacks,
    ]


def configure_logging(
    *,
    service_name: str,
    level: str,
    json_output: bool = True,
    cache_loggers: bool = True,
) -> None:
    """
    Route structlog through stdlib logging on stdout. `cache_loggers=False` keeps
    `structlog.testing.capture_logs` usable after configuration.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer(default=str)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[*shared_processors(service_name), renderer],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=cache_loggers,
    )


def _add_service_name(service_name: str):
    # Stable "service" field so enriched events can be told apart from host logs.
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Request-scoped metadata is bound via contextvars in `observability.middleware`.
