from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.dashboard import build_default_dashboard
from settings import get_settings

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    dashboard = build_default_dashboard()
    logger.info(
        "Dashboard ready with %d stored files",
        len(dashboard.files.list_files()),
        extra={"status": "started"},
    )
    if not get_settings().insights_api_key:
        logger.warning("INSIGHTS_API_KEY is not set; insights will use placeholders")
    try:
        yield
    finally:
        build_default_dashboard.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Insights Dashboard",
        description="Upload sensor CSV files, explore derived analytics and request AI insights.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app


app = create_app()
