"""Recent log records kept in memory by the logging setup."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from rainbow.core.config import settings
from rainbow.core.logging_config import get_log_buffer

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
def list_logs(
    limit: int = Query(100, ge=1, le=200),
    level: Optional[str] = Query(None, description="Only return records at this level"),
) -> dict[str, list[dict[str, str]]]:
    entries = get_log_buffer(limit=settings.log_buffer_size)
    if level:
        entries = [entry for entry in entries if entry["level"] == level.upper()]
    return {"logs": entries[:limit]}


__all__ = ["router"]
