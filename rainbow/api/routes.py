"""Service-level routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from rainbow.api.deps import get_db
from rainbow.core.config import settings

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["system"])


@health_router.get("/health", summary="Service and database health probe")
def healthcheck(session: Session = Depends(get_db)) -> dict[str, str]:
    """Report the service version and whether the observation store answers."""

    try:
        session.connection().execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health check could not reach the database: %s", exc)
        raise HTTPException(status_code=503, detail="Database unavailable") from exc
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": "ok",
    }
