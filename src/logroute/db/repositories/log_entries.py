"""
logroute.db.repositories.log_entries

Repository for `LogEntry` rows.

Responsibilities:
- Append log entries.
- List recent entries and purge entries past the retention window.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, desc, select
from sqlalchemy.orm import Session

from logroute.db.models import LogEntry


class LogEntryRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, *, message: str, severity: int, timestamp: datetime | None = None) -> LogEntry:
        # Entries are append-only; only `purge_expired` ever removes rows.
        entry = LogEntry(message=message, severity=severity)
        if timestamp is not None:
            entry.timestamp = timestamp
        self._session.add(entry)
        self._session.flush()
        return entry

    def list_recent(self, *, limit: int = 200) -> list[LogEntry]:
        stmt = select(LogEntry).order_by(desc(LogEntry.timestamp)).limit(limit)
        return list(self._session.execute(stmt).scalars().all())

    def purge_expired(self, max_days: int, *, now: datetime | None = None) -> int:
        """
        Delete entries older than `max_days`. A non-positive window keeps everything.
        """

        if max_days <= 0:
            return 0
        now = now or datetime.now(tz=UTC).replace(tzinfo=None)
        stmt = delete(LogEntry).where(LogEntry.timestamp < now - timedelta(days=max_days))
        return self._session.execute(stmt).rowcount or 0


# --- Module Notes -----------------------------------------------------------
# Retention is driven by an external job using `Settings.max_days_to_keep`.
