from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from datastore.weather_table import build_default_table
from logging_config import configure_logging
from services.history import build_default_history_service
from storage.weather_archive import build_default_archive


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # Building the services loads settings, so missing configuration fails startup.
    build_default_history_service()
    build_default_archive()
    try:
        yield
    finally:
        build_default_history_service.cache_clear()
        build_default_archive.cache_clear()
        build_default_table.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Weather History",
        description="Read-only history of periodically collected weather observations.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
