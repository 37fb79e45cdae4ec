"""FastAPI application for the correlation service."""

import logging

from fastapi import FastAPI

from .api import api_router
from .core.config import settings
from .core.logging_config import setup_logging
from .db.session import init_db
from .worker.correlation_queue import CORRELATION_QUEUE


def create_app() -> FastAPI:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Initializing %s API", settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Provide a friendly landing response for the bare hostname."""

        return {
            "message": (
                f"{settings.app_name} is online. Try GET "
                f"{settings.api_prefix}/health for a health check."
            )
        }

    @app.on_event("startup")
    def _bootstrap() -> None:
        init_db()
        CORRELATION_QUEUE.start()

    @app.on_event("shutdown")
    def _stop_worker() -> None:
        CORRELATION_QUEUE.stop(timeout=5.0)

    return app


app = create_app()
