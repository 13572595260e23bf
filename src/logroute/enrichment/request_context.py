"""
logroute.enrichment.request_context

Request-scoped environment snapshot used by the enricher.

Responsibilities:
- Define the `RequestEnvironment` snapshot (method, URI, payload, peer, timing).
- Store it in a contextvar so concurrent requests never see each other's data.
"""

from __future__ import annotations

import contextvars
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

# Stand-in request start for code running outside any request (CLI, workers).
PROCESS_STARTED_AT = int(time.time())


@dataclass(frozen=True, slots=True)
class RequestEnvironment:
    method: str | None = None
    uri: str | None = None
    user_agent: str | None = None

    query: Mapping[str, Any] = field(default_factory=dict)
    form: Mapping[str, Any] = field(default_factory=dict)
    files: Mapping[str, Any] = field(default_factory=dict)
    raw_body: str | None = None

    forwarded_for: str | None = None
    remote_addr: str | None = None
    store_code: str | None = None

    # High-resolution (float) and whole-second request start timestamps.
    started_at: float | None = None
    started_at_seconds: int | None = None


_current: contextvars.ContextVar[RequestEnvironment | None] = contextvars.ContextVar(
    "logroute_request_environment", default=None
)


def current_environment() -> RequestEnvironment:
    env = _current.get()
    if env is None:
        return RequestEnvironment(started_at_seconds=PROCESS_STARTED_AT)
    return env


def bind_environment(env: RequestEnvironment) -> contextvars.Token[RequestEnvironment | None]:
    return _current.set(env)


def reset_environment(token: contextvars.Token[RequestEnvironment | None]) -> None:
    _current.reset(token)


@contextmanager
def request_environment(env: RequestEnvironment) -> Iterator[RequestEnvironment]:
    """
    Bind `env` for the duration of the block (used by workers and tests;
    HTTP requests go through `observability.middleware`).
    """

    token = bind_environment(env)
    try:
        yield env
    finally:
        reset_environment(token)


# --- Module Notes -----------------------------------------------------------
# The snapshot is immutable; middleware builds a fresh one per request.
