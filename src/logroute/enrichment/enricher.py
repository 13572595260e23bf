"""
logroute.enrichment.enricher

Attach contextual metadata to a `LogEvent`.

Responsibilities:
- Resolve call site and (optionally) a bounded backtrace via `BacktraceWalker`.
- Snapshot request/environment data: method, URI, user agent, payload, peer address.
- Compute elapsed time since request start and resolve the hostname.
- Degrade every field independently to a placeholder; never raise into the caller.
"""

from __future__ import annotations

import json
import socket
import sys
import time
from collections.abc import Callable
from typing import Any

from logroute.core.events import LogEvent
from logroute.enrichment.backtrace import BacktraceWalker
from logroute.enrichment.request_context import RequestEnvironment, current_environment
from logroute.settings import Settings

HOSTNAME_UNAVAILABLE = "Could not determine hostname !"
REQUEST_DATA_LIMIT = 1000


def compact_json(value: Any) -> str | None:
    try:
        return json.dumps(value, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return None


def summarize_request_data(env: RequestEnvironment) -> str | None:
    """
    One `  LABEL|payload` line per non-empty source, each payload capped at
    1000 characters. Returns None when the request carried no data.
    """

    sections: list[str] = []
    for label, value in (("GET", env.query), ("POST", env.form), ("FILES", env.files)):
        if value:
            sections.append(f"  {label}|{(compact_json(value) or '')[:REQUEST_DATA_LIMIT]}")
    if env.raw_body:
        sections.append(f"  RAWPOST|{env.raw_body[:REQUEST_DATA_LIMIT]}")
    return "\n".join(sections) if sections else None


def format_elapsed(env: RequestEnvironment, now: float) -> str | None:
    # Prefer the high-resolution start; fall back to whole seconds.
    if env.started_at is not None:
        return f"{now - env.started_at:f}"
    if env.started_at_seconds is not None:
        return "%d" % (int(now) - env.started_at_seconds)
    return None


class Enricher:
    def __init__(
        self,
        *,
        settings: Settings,
        walker: BacktraceWalker | None = None,
        environment: Callable[[], RequestEnvironment] = current_environment,
        clock: Callable[[], float] = time.time,
        hostname: Callable[[], str] = socket.gethostname,
    ) -> None:
        self._settings = settings
        self._walker = walker or BacktraceWalker(
            base_dir=settings.base_dir, facade_class=settings.facade_class
        )
        self._environment = environment
        self._clock = clock
        self._hostname = hostname

    def enrich(
        self,
        event: LogEvent,
        not_available: str | None = None,
        backtrace_enabled: bool = False,
    ) -> LogEvent:
        na = not_available

        # Call site + backtrace
        max_frames = self._settings.max_backtrace_lines if backtrace_enabled else 0
        capture = self._walker.capture(max_frames)
        event.source_file = capture.call_site.file if capture.call_site else na
        event.source_line = capture.call_site.line if capture.call_site else na
        event.backtrace = capture.backtrace or na

        env = self._environment()
        event.store_code = env.store_code or self._settings.store_code or na
        event.elapsed_seconds = format_elapsed(env, self._clock()) or na

        # Outside HTTP the process itself stands in for the request.
        event.request_method = env.method or self._settings.execution_mode or na
        event.request_uri = env.uri or (sys.argv[0] if sys.argv and sys.argv[0] else na)
        event.user_agent = env.user_agent or na

        event.request_data = summarize_request_data(env) or na
        event.remote_addr = env.forwarded_for or env.remote_addr or na
        event.hostname = self._resolve_hostname()
        return event

    def _resolve_hostname(self) -> str:
        try:
            name = self._hostname()
        except OSError:
            return HOSTNAME_UNAVAILABLE
        return name or HOSTNAME_UNAVAILABLE


# --- Module Notes -----------------------------------------------------------
# Routing depends on `event.source_file`, so the dispatcher always enriches first.
