"""
logroute.db.models

Persistence schema for stored log entries.

Responsibilities:
- Define the append-only `LogEntry` table written by `sinks.database.DatabaseSink`.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from logroute.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity; production systems may use tz-aware types.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class LogEntry(Base):
    __tablename__ = "logroute_entries"

    entity_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # Severity value (0=EMERG .. 7=DEBUG).
    severity: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)


# --- Module Notes -----------------------------------------------------------
# The timestamp index keeps retention purges (`purge_expired`) cheap.
