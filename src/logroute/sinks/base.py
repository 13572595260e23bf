"""
logroute.sinks.base

Sink contract shared by all output writers.

Responsibilities:
- Define the abstract `Sink` (name + write of a finished event).
- Apply attached filters before the concrete writer sees the event.
"""

from __future__ import annotations

import abc
from typing import Any, Protocol

from logroute.core.events import LogEvent


class EventFilter(Protocol):
    def accept(self, severity: Any) -> bool: ...


class Sink(abc.ABC):
    """
    A named destination. Subclasses implement `_write` and own their transport.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._filters: list[EventFilter] = []

    def add_filter(self, event_filter: EventFilter) -> None:
        self._filters.append(event_filter)

    def accepts(self, severity: Any) -> bool:
        return all(f.accept(severity) for f in self._filters)

    def write(self, event: LogEvent, severity: Any) -> None:
        if self.accepts(severity):
            self._write(event, severity)

    @abc.abstractmethod
    def _write(self, event: LogEvent, severity: Any) -> None: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
