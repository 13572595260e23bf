"""
logroute.install

One-call wiring of logroute into a host process.

Responsibilities:
- Configure structlog from settings.
- Build the dispatcher (with per-sink priority filters) and attach it to `Log`.
"""

from __future__ import annotations

from collections.abc import Iterable

from logroute.dispatch import Dispatcher, build_dispatcher
from logroute.facade import Log
from logroute.observability.logging import configure_logging, get_logger
from logroute.settings import Settings
from logroute.sinks.base import Sink
from logroute.sinks.stream import StructlogSink

log = get_logger(__name__)


def install(
    *,
    settings: Settings,
    sinks: Iterable[Sink] | None = None,
    json_output: bool = True,
    cache_loggers: bool = True,
) -> Dispatcher:
    # Configure logging once at process startup, before the first log call.
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_output=json_output,
        cache_loggers=cache_loggers,
    )

    sinks = list(sinks) if sinks is not None else [StructlogSink()]
    dispatcher = build_dispatcher(settings=settings, sinks=sinks)
    Log.configure(dispatcher)
    log.info(
        "logroute_installed",
        sinks=sorted(dispatcher.sinks),
        routed=dispatcher.has_rules,
    )
    return dispatcher


# --- Module Notes -----------------------------------------------------------
# Hosts serving HTTP also add `observability.middleware.RequestContextMiddleware`
# to their app; everything else is reachable through `Log`.
