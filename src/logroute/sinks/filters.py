"""
logroute.sinks.filters

Severity threshold filters for sinks.

Responsibilities:
- Accept events at or above a configured severity (numerically at or below it).
- Resolve a sink's threshold from settings (per-sink override, global default).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from logroute.core.severity import Severity
from logroute.settings import Settings


@dataclass(frozen=True, slots=True)
class PriorityFilter:
    threshold: Severity

    def accept(self, severity: Any) -> bool:
        value = Severity.coerce(severity)
        # Unclassifiable severities pass through so the sink can report them.
        if value is None:
            return True
        return value <= self.threshold


def priority_filter_for(settings: Settings, sink_name: str | None = None) -> PriorityFilter | None:
    """
    Returns None when no filter should be attached: the resolved threshold is
    WARN (the host's own default) or does not name a severity.
    """

    priority: str | None = None
    if sink_name:
        priority = settings.sink_priorities.get(sink_name)
        if priority == "default":
            priority = None
    if not priority or not priority.strip():
        priority = settings.priority

    threshold = Severity.parse(priority)
    if threshold is None or threshold == Severity.WARN:
        return None
    return PriorityFilter(threshold)


# --- Module Notes -----------------------------------------------------------
# `dispatch.build_dispatcher` attaches these filters when it registers sinks.
