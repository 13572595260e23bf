"""
logroute.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs and bind request metadata into structlog contextvars.
- Snapshot the request environment the enricher reads (method, URI, payload, peer).
- Collect console-relay rows and attach them to the response header.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.datastructures import UploadFile
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from logroute.enrichment.request_context import (
    RequestEnvironment,
    bind_environment,
    reset_environment,
)
from logroute.settings import Settings, get_settings
from logroute.sinks.console import HEADER_NAME, close_relay, encode_header, open_relay, relay_rows

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def snapshot_request(request: Request, *, store_code: str | None) -> RequestEnvironment:
    started_at = time.time()
    # Reading the body here caches it; the downstream app still receives it.
    body = await request.body()

    form: dict[str, str] = {}
    files: dict[str, dict[str, object]] = {}
    raw_body: str | None = None
    if request.headers.get("content-type", "").startswith(_FORM_TYPES):
        async with request.form() as form_data:
            for key, value in form_data.multi_items():
                if isinstance(value, UploadFile):
                    files[key] = {
                        "name": value.filename,
                        "type": value.content_type,
                        "size": value.size,
                    }
                else:
                    form[key] = value
    elif body:
        raw_body = body.decode("utf-8", errors="replace")

    uri = request.url.path + (f"?{request.url.query}" if request.url.query else "")
    return RequestEnvironment(
        method=request.method,
        uri=uri,
        user_agent=request.headers.get("user-agent"),
        query=dict(request.query_params),
        form=form,
        files=files,
        raw_body=raw_body,
        forwarded_for=request.headers.get("x-forwarded-for"),
        remote_addr=request.client.host if request.client else None,
        store_code=store_code,
        started_at=started_at,
        started_at_seconds=int(started_at),
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Ensures every request has a request id
    - Binds request-scoped contextvars for structured logs and enrichment
    - Relays collected console rows back to the browser
    """

    def __init__(self, app: ASGIApp, *, settings: Settings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()

    async def dispatch(self, request: Request, call_next) -> Response:
        # Prefer a caller-provided request id for trace continuity; otherwise generate one.
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        env = await snapshot_request(request, store_code=self._settings.store_code)
        env_token = bind_environment(env)
        relay_token = open_relay()
        try:
            response: Response = await call_next(request)
            rows = relay_rows()
        finally:
            # Avoid leaking context across requests under async concurrency.
            close_relay(relay_token)
            reset_environment(env_token)
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        if rows:
            response.headers[HEADER_NAME] = encode_header(rows)
        return response


# --- Module Notes -----------------------------------------------------------
# The downstream app runs in a task that copies this context, so the relay buffer
# is shared by reference and rows appended there are visible here.
