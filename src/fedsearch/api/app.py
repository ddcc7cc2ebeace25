"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fedsearch import __version__
from fedsearch.api.deps import set_settings
from fedsearch.api.v1.router import router as v1_router
from fedsearch.config.settings import Settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.
        transport: Optional ``httpx`` transport used for outbound source
            requests (lets tests stub the sources in-process).

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # Auto-detect fedsearch-config.yaml if present
        yaml_path = Path("fedsearch-config.yaml")
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        logger.info(
            "Starting fedsearch v%s with %d configured sources",
            __version__,
            len(settings.federation.urls),
        )
        set_settings(settings)
        yield
        set_settings(None)
        logger.info("fedsearch shutdown complete")

    app = FastAPI(
        title="fedsearch",
        description="Federated OpenSearch client — merges results from many search endpoints.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.transport = transport

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/v1")

    return app
