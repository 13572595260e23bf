"""
logroute.core.events

The per-call log event record.

Responsibilities:
- Carry message + severity from the façade through enrichment to sinks.
- Hold contextual metadata filled in by `enrichment.enricher.Enricher`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from logroute.core.severity import Severity, severity_label


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class LogEvent:
    """
    Mutable record created per log call, populated once by the enricher and
    discarded after dispatch.
    """

    message: str
    # Severity member, or a plain int for custom priorities outside the scale.
    severity: Severity | int

    # Call site
    source_file: str | None = None
    source_line: int | str | None = None
    backtrace: str | None = None

    # Application / request context
    store_code: str | None = None
    elapsed_seconds: str | None = None
    request_method: str | None = None
    request_uri: str | None = None
    user_agent: str | None = None
    request_data: str | None = None
    remote_addr: str | None = None
    hostname: str | None = None

    timestamp: datetime = field(default_factory=_utcnow)

    def copy(self, **changes: Any) -> LogEvent:
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        # Flat mapping for renderers; known severities are exposed by name.
        data = dataclasses.asdict(self)
        data["severity"] = severity_label(self.severity)
        data["timestamp"] = self.timestamp.isoformat()
        return data


# --- Module Notes -----------------------------------------------------------
# Sentinels are caller-supplied, so unset fields stay None until enrichment runs.
