"""
logroute.db

Persistence support for the database sink.

Responsibilities:
- ORM model for stored log entries.
- Engine/session helpers and the log entry repository.
"""

# Package marker; modules are imported directly.
