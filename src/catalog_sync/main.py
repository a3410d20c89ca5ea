"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_sync import __version__
from catalog_sync.api.router import api_router
from catalog_sync.config import get_settings
from catalog_sync.container import build_container
from catalog_sync.logging_config import configure_logging
from catalog_sync.middleware.request_context import RequestContextMiddleware

configure_logging(get_settings())

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build services on startup and close their connections on shutdown."""
    settings = get_settings()
    logger.info(
        "Starting catalog sync service",
        service=settings.service_name,
        app_env=settings.app_env,
        debug=settings.debug,
    )

    container = await build_container(settings)
    app.state.container = container

    yield

    await container.aclose()
    logger.info("Shutting down catalog sync service", service=settings.service_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Catalog Sync API",
        description="Synchronizes the commercetools product catalog into Google Cloud Retail",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "catalog_sync.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.api_workers,
    )


if __name__ == "__main__":
    run()
