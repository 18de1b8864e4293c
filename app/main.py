from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.tracker import build_default_tracker


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    tracker = build_default_tracker()
    try:
        yield
    finally:
        tracker.shutdown()
        build_default_tracker.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Docking Station Tracker",
        description="Reconciles the live docking station feed with a persisted station registry.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
