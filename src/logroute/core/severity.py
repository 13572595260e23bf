"""
logroute.core.severity

Severity levels for log events.

Responsibilities:
- Define the 8-level syslog-style severity scale (lower value = more severe).
- Parse loosely typed severities coming from callers and configuration.
- Map severities onto the 3 buckets understood by browser consoles.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Literal


class Severity(enum.IntEnum):
    # Numeric values are persisted by the database sink; treat as stable contract.
    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARN = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @classmethod
    def parse(cls, value: Any) -> Severity | None:
        """
        Best-effort conversion of an enum member, int, numeric string or level name.
        Returns None when the value does not name a known severity.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls.parse(int(text))
            return cls.__members__.get(text.upper())
        return None

    @classmethod
    def coerce(cls, value: Any) -> Severity | int | None:
        """
        Like `parse`, but integer priorities outside the scale are kept as plain
        ints so sinks that store or forward numbers can still accept them.
        """

        parsed = cls.parse(value)
        if parsed is not None:
            return parsed
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value.strip())
        return None

    @property
    def stdlib_level(self) -> int:
        return _STDLIB_LEVELS[self]


ConsoleBucket = Literal["error", "warn", "info"]

_CONSOLE_BUCKETS: dict[Severity, ConsoleBucket] = {
    Severity.EMERG: "error",
    Severity.ALERT: "error",
    Severity.CRIT: "error",
    Severity.ERR: "error",
    Severity.WARN: "warn",
    Severity.NOTICE: "info",
    Severity.INFO: "info",
    Severity.DEBUG: "info",
}

_STDLIB_LEVELS: dict[Severity, int] = {
    Severity.EMERG: logging.CRITICAL,
    Severity.ALERT: logging.CRITICAL,
    Severity.CRIT: logging.CRITICAL,
    Severity.ERR: logging.ERROR,
    Severity.WARN: logging.WARNING,
    Severity.NOTICE: logging.INFO,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}


def stdlib_level(severity: Severity | int) -> int:
    # Custom priorities clamp to the nearest end of the scale.
    if isinstance(severity, Severity):
        return severity.stdlib_level
    return logging.CRITICAL if severity < Severity.EMERG else logging.DEBUG


def severity_label(severity: Severity | int) -> str:
    return severity.name if isinstance(severity, Severity) else str(severity)


def console_bucket(severity: Any) -> ConsoleBucket | None:
    # Unknown values map to None; callers decide how to report them.
    parsed = Severity.parse(severity)
    if parsed is None:
        return None
    return _CONSOLE_BUCKETS[parsed]


# --- Module Notes -----------------------------------------------------------
# The console bucket mapping is consumed by `sinks.console`; the stdlib mapping by
# `sinks.stream` so structlog renders familiar level names.
