"""
logroute.db.base

SQLAlchemy declarative base.

Responsibilities:
- Provide a shared DeclarativeBase for the database sink's models.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# Hosts create the tables themselves (migrations or `Base.metadata.create_all`).
