"""API dependencies."""

from __future__ import annotations

from collections.abc import Generator

from sqlmodel import Session

from rainbow.db.session import get_session_dep
from rainbow.worker.correlation_queue import CORRELATION_QUEUE, CorrelationQueue


def get_db() -> Generator[Session, None, None]:
    yield from get_session_dep()


def get_queue() -> CorrelationQueue:
    return CORRELATION_QUEUE
