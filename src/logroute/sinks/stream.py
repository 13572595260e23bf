"""
logroute.sinks.stream

Sink that re-emits enriched events through structlog.

Responsibilities:
- Render each event as one structured record (JSON via `observability.logging`).
- Map severities onto stdlib levels so downstream level filtering keeps working.
"""

from __future__ import annotations

from typing import Any

import structlog

from logroute.core.events import LogEvent
from logroute.core.severity import Severity, severity_label, stdlib_level
from logroute.observability.logging import get_logger
from logroute.sinks.base import Sink


class StructlogSink(Sink):
    def __init__(
        self,
        name: str = "stream",
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        super().__init__(name)
        self._log = logger or get_logger("logroute.events")

    def _write(self, event: LogEvent, severity: Any) -> None:
        level = Severity.coerce(severity)
        if level is None:
            level = event.severity
        fields = event.to_dict()
        message = fields.pop("message")
        # structlog's TimeStamper owns the "timestamp" key.
        fields["logged_at"] = fields.pop("timestamp")
        fields["severity"] = severity_label(level)
        self._log.log(stdlib_level(level), message, sink=self.name, **fields)


# --- Module Notes -----------------------------------------------------------
# Call `configure_logging` once at startup; without it structlog falls back to its
# default console renderer.
