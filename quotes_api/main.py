"""FastAPI application entry point.

Random Quote Generator API - upstream quotes with likes and smart picks,
served over REST (/api/quotes) and GraphQL (/graphql).
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
import logging
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quotes_api.errors import QuoteServiceError
from quotes_api.gql import create_graphql_router
from quotes_api.routes import api_router
from quotes_api.schemas import ErrorDetail, ErrorResponse, HealthResponse
from quotes_api.services.quotes import close_quote_service
from quotes_api.settings import get_settings
from quotes_api.stores.postgres import close_db, create_tables, init_db, ping_db

logger = logging.getLogger("uvicorn.error")

# Fallback when the lifespan has not run (e.g. ASGI test clients)
_PROCESS_STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    app.state.started_at = time.monotonic()

    # Initialize database (skip in tests if no DB available)
    try:
        await init_db()
        if settings.auto_create_tables:
            await create_tables()
        await ping_db()
        logger.info("Database connected")
    except Exception:
        logger.exception("Database init failed")

    yield

    await close_quote_service()
    await close_db()
    logger.info("Shutdown complete")


def _error_response(
    status_code: int,
    code: str,
    message: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        error=ErrorDetail(code=code, message=message, detail=detail),
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A web service for serving random quotes with REST and GraphQL APIs",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(QuoteServiceError)
    async def quote_service_exception_handler(request: Request, exc: QuoteServiceError) -> JSONResponse:
        """Typed service errors keep their stable code."""
        return _error_response(exc.status_code, exc.code, exc.message, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            400,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": jsonable_encoder(exc.errors())},
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.url.path}")
        return _error_response(
            500,
            "INTERNAL_ERROR",
            str(exc) if settings.debug else "Internal server error",
        )

    # Health check endpoint
    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        started_at = getattr(request.app.state, "started_at", _PROCESS_STARTED_AT)
        return HealthResponse(
            timestamp=datetime.now(timezone.utc),
            uptime=round(time.monotonic() - started_at, 3),
            environment=settings.environment,
        )

    @app.get("/", tags=["info"])
    async def api_info() -> dict[str, Any]:
        """API information and available endpoints."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": "A web service for serving random quotes with REST and GraphQL APIs",
            "endpoints": {
                "rest": "/api/quotes",
                "graphql": "/graphql",
                "docs": "/docs",
                "health": "/health",
            },
        }

    # Include API routes
    app.include_router(api_router)
    app.include_router(
        create_graphql_router(graphiql=settings.graphiql_enabled),
        prefix="/graphql",
        tags=["graphql"],
    )

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "quotes_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
