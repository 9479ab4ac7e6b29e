"""
FastAPI main application for the Personal Library API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from library_api import __version__
from library_api.config import APIConfig, config
from library_api.database import BookStore
from library_api.models import ErrorResponse, HealthResponse
from library_api.routes import router as books_router
from utilities.logger import setup_logging

# Setup logging
logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[APIConfig] = None,
    book_store: Optional[BookStore] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: API settings, defaults to the environment configuration
        book_store: Store to serve requests from. When omitted, a MongoDB
            connection is opened on startup and closed on shutdown.

    Returns:
        Configured FastAPI application
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        # Startup
        setup_logging(
            log_level=settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file,
            debug=settings.debug
        )
        logger.info("Starting Personal Library API")

        client = None
        if app.state.book_store is None:
            try:
                client = AsyncIOMotorClient(settings.mongodb_url)
                database = client[settings.mongodb_database]

                # Test connection
                await database.command("ping")
                logger.info(
                    "Database connection established",
                    database=settings.mongodb_database,
                    collection=settings.mongodb_collection
                )

                app.state.book_store = BookStore(database, settings.mongodb_collection)

            except Exception as e:
                logger.error("Failed to connect to database", error=str(e))
                if client:
                    client.close()
                raise

        yield

        # Shutdown
        logger.info("Shutting down Personal Library API")
        if client:
            client.close()
            app.state.book_store = None

    app = FastAPI(
        title=settings.api_title,
        description="""
    A small REST API for keeping a personal library.

    ## Features

    * **Books**: Add books by title, list them, and delete one or all of them
    * **Comments**: Append comments to a book and read them back in order
    """,
        version=__version__,
        license_info={
            "name": "MIT",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.book_store = book_store

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                status_code=exc.status_code
            ).model_dump(),
            headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="Internal server error",
                detail=str(exc) if settings.debug else None,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
            ).model_dump()
        )

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        db_status = "unavailable"
        book_store = request.app.state.book_store
        if book_store is not None:
            health_info = await book_store.health_check()
            db_status = health_info.get("status", "unknown")

        return HealthResponse(
            status="healthy" if db_status == "healthy" else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=__version__,
            database_status=db_status
        )

    app.include_router(books_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "library_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
