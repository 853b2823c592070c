"""Reservation system API: FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reservation_api.api.v1 import groups
from reservation_api.api.v1.error_handlers import register_exception_handlers
from reservation_api.config.settings import Settings, get_settings
from reservation_api.core.logging import RequestIDMiddleware, setup_logging, stop_queue_logging
from reservation_api.database.base import Base
from reservation_api.database.session import dispose_engine, get_engine
from reservation_api.utils.logging import get_project_version

# Registers the groups table on Base.metadata
import reservation_api.models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _make_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: optionally create tables. Shutdown: dispose engine, flush queued logs."""
        if settings.CREATE_TABLES_ON_STARTUP:
            await create_tables()
            logger.info("Database tables ensured")
        logger.info("Application started", extra={"environment": settings.ENV})
        try:
            yield
        finally:
            await dispose_engine()
            logger.info("Application stopped")
            stop_queue_logging()

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=get_project_version(),
        lifespan=_make_lifespan(settings),
    )

    register_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)
    app.include_router(groups.router, prefix=settings.API_PREFIX)

    return app


app = create_app()
