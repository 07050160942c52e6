from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging
import time

import uvicorn

from app.config import Settings, get_settings
from app.database import Database
from app.api import products, health
from app.api.errors import register_exception_handlers
# Registers the products table on the metadata
from app.models import product as product_model  # noqa: F401

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    The datastore must be reachable before requests are accepted; the
    process exits if the first connection fails.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting up {settings.PROJECT_NAME} ({settings.ENV})...")
    if app.state.database is None:
        app.state.database = Database.from_settings(settings)
    database: Database = app.state.database

    try:
        database.connect()
    except SQLAlchemyError as e:
        logger.error(f"Unable to connect to the database: {e}")
        raise SystemExit(1) from e

    yield

    # Shutdown
    logger.info("Shutting down application...")
    database.dispose()


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use, defaults to `get_settings()`
        database: Datastore handle; built from settings on startup when omitted
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="""
        REST API for the product catalog.

        - **List** products with pagination and exact `name` / `price` filters
        - **Create**, **replace** (full overwrite), **update** (partial) and **delete** products

        Products are addressed by a 24-character hexadecimal ID.
        """,
        version=settings.VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = database

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
        )
        return response

    register_exception_handlers(app)

    # Include API routers
    app.include_router(health.router, prefix=settings.API_V1_PREFIX)
    app.include_router(products.router, prefix=settings.API_V1_PREFIX)

    @app.get("/", tags=["Root"])
    def root():
        """Root endpoint with API information."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
            "health": f"{settings.API_V1_PREFIX}/health"
        }

    return app


app = create_app()


def run() -> None:
    """Serve the application on the configured host and port."""
    settings = get_settings()
    logger.info(f"Server starting on port {settings.PORT} ({settings.ENV})")
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
