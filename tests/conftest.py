"""
tests.conftest

Shared fixtures for logroute tests.

Responsibilities:
- Provide an in-memory recording sink.
- Provide settings pinned to this directory and reset the façade between tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from logroute.core.events import LogEvent
from logroute.facade import Log
from logroute.settings import Settings
from logroute.sinks.base import Sink

TESTS_DIR = Path(__file__).resolve().parent


class RecordingSink(Sink):
    def __init__(self, name: str = "memory") -> None:
        super().__init__(name)
        self.records: list[tuple[LogEvent, Any]] = []

    def _write(self, event: LogEvent, severity: Any) -> None:
        self.records.append((event, severity))

    @property
    def events(self) -> list[LogEvent]:
        return [event for event, _ in self.records]


def make_settings(**overrides: Any) -> Settings:
    # app_root's parent is the tests dir, so call sites render as "test_*.py".
    values: dict[str, Any] = {"app_root": TESTS_DIR / "app", "max_backtrace_lines": 5}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def memory_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def _reset_facade():
    yield
    Log.configure(None)
