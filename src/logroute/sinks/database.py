"""
logroute.sinks.database

Sink that persists events as `LogEntry` rows.

Responsibilities:
- Append one row (message, severity, timestamp) per delivered event.
- Own the transaction for each write.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from logroute.core.events import LogEvent
from logroute.core.severity import Severity
from logroute.db.repositories.log_entries import LogEntryRepo
from logroute.sinks.base import Sink


class DatabaseSink(Sink):
    def __init__(self, *, session_factory: sessionmaker[Session], name: str = "db") -> None:
        super().__init__(name)
        self._session_factory = session_factory

    def _write(self, event: LogEvent, severity: Any) -> None:
        level = Severity.coerce(severity)
        if level is None:
            level = event.severity
        with self._session_factory() as session:
            LogEntryRepo(session).add(
                message=event.message,
                severity=int(level),
                timestamp=event.timestamp.replace(tzinfo=None),
            )
            session.commit()


# --- Module Notes -----------------------------------------------------------
# Failures propagate to the dispatcher, which logs them without affecting other sinks.
