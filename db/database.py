"""
db/database.py

Database engine + session factory.

Usage
-----
from db.database import SessionLocal, session_scope

with session_scope(SessionLocal) as db:
    user = db.query(User).filter_by(id="...").first()

Services receive a session factory (sessionmaker) instead of reaching for
the module-level one, so tests can point them at an in-memory engine.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

import config
from db.models import Base

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def make_engine(url: str = config.DATABASE_URL, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_size", 5)
        kwargs.setdefault("max_overflow", 10)
    return create_engine(
        url,
        echo=False,             # set True to see SQL in terminal during dev
        pool_pre_ping=True,     # check connection health before each use
        **kwargs,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # views are built after commit
    )


# ── Process-wide defaults ─────────────────────────────────────────────────────
engine       = make_engine()
SessionLocal = make_session_factory(engine)


@contextmanager
def session_scope(factory: SessionFactory) -> Generator[Session, None, None]:
    """
    Yields a session from `factory`, commits on success, rolls back on error.

    Example:
        with session_scope(SessionLocal) as db:
            db.add(user)
    """
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ── Table creation (dev / test only) ─────────────────────────────────────────

def create_tables(bind: Optional[Engine] = None) -> None:
    """
    Create all tables from ORM models.
    Use Alembic migrations in production — this is for dev/testing only.
    """
    Base.metadata.create_all(bind=bind or engine)
    logger.info("✅ Database tables created.")


def drop_tables(bind: Optional[Engine] = None) -> None:
    """Drop all tables. DANGEROUS — dev/test only."""
    Base.metadata.drop_all(bind=bind or engine)
    logger.warning("⚠️ All tables dropped.")
