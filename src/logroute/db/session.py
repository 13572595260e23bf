"""
logroute.db.session

SQLAlchemy engine + session factory helpers.

Responsibilities:
- Create the engine from settings.
- Create the sessionmaker with safe defaults.
"""

from __future__ import annotations

from sqlalchemy import Engine, create_engine as sa_create_engine
from sqlalchemy.orm import Session, sessionmaker

from logroute.settings import Settings


def create_engine(settings: Settings) -> Engine:
    # pool_pre_ping helps detect stale connections in long-lived processes.
    return sa_create_engine(settings.database_url, pool_pre_ping=True)


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False avoids surprising lazy loads after commits.
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


# --- Module Notes -----------------------------------------------------------
# The logging path is synchronous, so the sink uses a plain (non-async) engine.
