"""
logroute.sinks.console

Browser-console relay sink (ChromeLogger protocol).

Responsibilities:
- Collect events per request and classify them into error/warn/info buckets.
- Encode the collected rows as the `X-ChromeLogger-Data` response header value.
- Report events whose severity cannot be classified instead of dropping them silently.
"""

from __future__ import annotations

import base64
import contextvars
import json
from typing import Any

from logroute.core.events import LogEvent
from logroute.core.severity import console_bucket
from logroute.observability.logging import get_logger
from logroute.sinks.base import Sink

log = get_logger(__name__)

HEADER_NAME = "X-ChromeLogger-Data"
PROTOCOL_VERSION = "4.1.0"
COLUMNS = ["log", "backtrace", "type"]

_rows: contextvars.ContextVar[list[list[Any]] | None] = contextvars.ContextVar(
    "logroute_console_rows", default=None
)


def open_relay() -> contextvars.Token[list[list[Any]] | None]:
    return _rows.set([])


def close_relay(token: contextvars.Token[list[list[Any]] | None]) -> None:
    _rows.reset(token)


def relay_rows() -> list[list[Any]]:
    return list(_rows.get() or [])


def encode_header(rows: list[list[Any]]) -> str:
    payload = {"version": PROTOCOL_VERSION, "columns": COLUMNS, "rows": rows}
    raw = json.dumps(payload, separators=(",", ":"), default=str).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


class ConsoleRelaySink(Sink):
    def __init__(self, name: str = "console") -> None:
        super().__init__(name)

    def _write(self, event: LogEvent, severity: Any) -> None:
        if severity is None:
            log.warning("missing_log_level", sink=self.name)
            return

        bucket = console_bucket(severity)
        if bucket is None:
            # Configuration problem upstream; other sinks still receive the event.
            log.warning("unknown_log_level", sink=self.name, severity=severity)
            return

        rows = _rows.get()
        if rows is None:
            # No request is collecting rows (CLI, background work).
            return
        location = f"{event.source_file} : {event.source_line}"
        rows.append([[event.message], location, bucket])


# --- Module Notes -----------------------------------------------------------
# `observability.middleware.RequestContextMiddleware` opens and closes the relay
# buffer and attaches the header to the response.
