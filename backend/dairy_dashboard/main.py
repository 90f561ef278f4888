"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dairy_dashboard.config import get_settings
from dairy_dashboard.infrastructure.dependencies import (
    get_entity_catalog,
    get_session_context,
    get_workspace,
)
from dairy_dashboard.infrastructure.logging.log_config import setup_logging
from dairy_dashboard.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — load the entity catalog, tear modules down on exit."""
    settings = get_settings()
    setup_logging()

    # 1. Parse the entity catalog (fails fast on a malformed file)
    catalog = get_entity_catalog()
    logger.info(
        "Dashboard ready: %d record modules, farm API at %s",
        len(catalog),
        settings.farm_api_base_url,
    )

    # 2. Build the workspace so it is registered with the session
    get_workspace()

    yield

    # Shutdown
    get_session_context().end()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dairy_dashboard.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
