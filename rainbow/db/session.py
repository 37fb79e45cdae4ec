"""SQLModel session management."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlmodel import Session, SQLModel, create_engine

from rainbow.core.config import settings

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url, echo=False, pool_pre_ping=True, connect_args=_connect_args
)


def init_db() -> None:
    SQLModel.metadata.create_all(engine)


@contextmanager
def get_session() -> Iterator[Session]:
    """Get a database session as a context manager (for use with 'with' statement).

    The correlation worker opens one of these per job run. For FastAPI
    dependency injection, use get_session_dep() instead.
    """
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()


def get_session_dep() -> Iterator[Session]:
    """Get a database session for FastAPI dependency injection."""
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()
