"""FastAPI application entry point for Promoscope."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promoscope.api.routes import router
from promoscope.config.settings import APIConfig

VERSION = "1.0.0"


def _resolve_cors_origins() -> list[str]:
    origins_raw = os.getenv("PROMOSCOPE_ALLOWED_ORIGINS", "")
    origins = [origin.strip() for origin in origins_raw.split(",") if origin.strip()]
    if "*" in origins:
        raise RuntimeError("PROMOSCOPE_ALLOWED_ORIGINS cannot include '*'")
    return origins


def create_app() -> FastAPI:
    """Factory function for creating the FastAPI application."""
    api_config = APIConfig()
    logging.basicConfig(
        level=api_config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Promoscope",
        description="Rendered-page extraction for release promotion reports",
        version=VERSION,
    )

    cors_origins = _resolve_cors_origins()
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "promoscope", "version": VERSION}

    return app


app = create_app()
