"""API router definitions."""

from fastapi import APIRouter

from .logs import router as logs_router
from .photos import router as photos_router
from .routes import health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(photos_router)
api_router.include_router(logs_router)

__all__ = ["api_router"]
