"""
logroute.dispatch

Composition of enrichment, routing and sink delivery for a single log call.

Responsibilities:
- Build and enrich a `LogEvent` (enrichment discovers the filename routing needs).
- Resolve targets via `Router` and deliver to the matching registered sinks.
- Keep sink failures away from the code that logged.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from logroute.core.events import LogEvent
from logroute.core.severity import Severity
from logroute.enrichment.enricher import Enricher
from logroute.observability.logging import get_logger
from logroute.routing.router import Router
from logroute.settings import Settings
from logroute.sinks.base import Sink
from logroute.sinks.filters import priority_filter_for

log = get_logger(__name__)


class Dispatcher:
    def __init__(
        self,
        *,
        settings: Settings,
        sinks: Iterable[Sink] = (),
        enricher: Enricher | None = None,
        router: Router | None = None,
    ) -> None:
        self._settings = settings
        self._enricher = enricher or Enricher(settings=settings)
        self._router = router or Router(settings=settings)
        self._sinks: dict[str, Sink] = {}
        for sink in sinks:
            self.register(sink)

    @property
    def sinks(self) -> dict[str, Sink]:
        return dict(self._sinks)

    @property
    def has_rules(self) -> bool:
        return bool(self._router.rules)

    def register(self, sink: Sink) -> None:
        self._sinks[sink.name] = sink

    def dispatch(self, message: Any, severity: Any = Severity.DEBUG) -> LogEvent | None:
        """
        Enrich and deliver one event. Returns the enriched event, or None when
        the severity is neither a known level nor an integer priority.

        Integer priorities outside the scale are delivered as-is; sinks that
        cannot classify them report and drop the event on their own.
        """

        level = Severity.coerce(severity)
        if level is None:
            log.warning("unknown_log_level", severity=severity)
            return None

        na = self._settings.not_available
        event = LogEvent(message=_message_text(message, na), severity=level)

        if not self.has_rules:
            # No rule set: every sink receives the event, without backtrace.
            self._enricher.enrich(event, na, backtrace_enabled=False)
            for sink in self._sinks.values():
                self._deliver(sink, event, level)
            return event

        self._enricher.enrich(event, na, backtrace_enabled=True)
        targets = self._router.route(event.source_file) or {}
        for name, wants_backtrace in targets.items():
            sink = self._sinks.get(name)
            if sink is None:
                log.debug("unknown_log_target", target=name)
                continue
            delivered = event if wants_backtrace else event.copy(backtrace=na)
            self._deliver(sink, delivered, level)
        return event

    def _deliver(self, sink: Sink, event: LogEvent, level: Severity | int) -> None:
        try:
            sink.write(event, level)
        except Exception:
            log.exception("sink_write_failed", sink=sink.name)


def _message_text(message: Any, fallback: str) -> str:
    try:
        return str(message)
    except Exception:
        log.debug("unrenderable_message", message_type=type(message).__name__, exc_info=True)
        return fallback


def build_dispatcher(*, settings: Settings, sinks: Iterable[Sink]) -> Dispatcher:
    # Attach per-sink priority filters from configuration before registering.
    sinks = list(sinks)
    for sink in sinks:
        priority_filter = priority_filter_for(settings, sink.name)
        if priority_filter is not None:
            sink.add_filter(priority_filter)
    return Dispatcher(settings=settings, sinks=sinks)


# --- Module Notes -----------------------------------------------------------
# Enrichment runs once per call with backtrace enabled when rules exist; targets
# that did not ask for a backtrace get a copy with the placeholder instead.
