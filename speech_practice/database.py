"""
Speech Practice v1.0 — Database Engine
SQLAlchemy setup for the key-value store that backs session history.
Works with SQLite (dev, tests) and PostgreSQL (hosted).
"""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from speech_practice.config import DATABASE_URL

logger = logging.getLogger(__name__)


# ─── Engine Setup ────────────────────────────────────────────────────────────

def make_engine(url: str = DATABASE_URL) -> Engine:
    """Create an engine for `url`. In-memory SQLite shares one connection."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    # PostgreSQL: pooled
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Test connections before use
        echo=False,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


# ─── Base Class ──────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to run multiple times."""
    # Import for side effect: registers tables on Base.metadata
    from speech_practice import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready: {engine.url.render_as_string(hide_password=True)}")
