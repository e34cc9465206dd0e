# ==============================================================================
# MAIN APPLICATION - FastAPI Entry Point
# ==============================================================================
# Application factory with lifespan events, middleware, and routing
# ==============================================================================

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from storefront.core.settings import settings
from storefront.core.exceptions import AppException
from storefront.database.factory import DatabaseFactory
from storefront.api.router import api_router
from storefront.middleware import RateLimitMiddleware, RequestLoggerMiddleware
from storefront.schemas.base import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# ==============================================================================
# LIFESPAN MANAGEMENT
# ==============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Connect to MongoDB and ensure indexes
    - Shutdown: Close database connections
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")

    if not DatabaseFactory.is_initialized():
        try:
            await DatabaseFactory.initialize()
        except AppException as e:
            logger.error(f"Failed to initialize database: {e}")
            if settings.is_production:
                raise

    yield

    logger.info("Shutting down application...")
    await DatabaseFactory.shutdown()
    logger.info("Application shutdown complete")


# ==============================================================================
# APPLICATION FACTORY
# ==============================================================================

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )

    # Middleware runs outermost-last: CORS wraps logging wraps rate limiting
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)
    register_health_endpoints(app)

    return app


# ==============================================================================
# EXCEPTION HANDLERS
# ==============================================================================

def _envelope(code: str, message: str, details=None) -> dict:
    return {
        "success": False,
        "message": message,
        "error": {"code": code, "message": message, "details": details or {}},
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> JSONResponse:
        """Handle application exceptions."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.error_code} {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Render framework HTTP errors in the standard envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(f"HTTP_{exc.status_code}", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report request validation failures as 400 with per-field messages."""
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        content = _envelope("VALIDATION_ERROR", "Validation failed", {"errors": errors})
        content["errors"] = errors
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")

        detail = str(exc) if settings.DEBUG else "An unexpected error occurred"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope("INTERNAL_ERROR", detail),
        )


# ==============================================================================
# HEALTH ENDPOINTS
# ==============================================================================

def register_health_endpoints(app: FastAPI) -> None:
    """Register health check endpoints."""

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Health check",
        description="Check application and database health.",
    )
    async def health_check() -> HealthResponse:
        db_healthy = await DatabaseFactory.health_check()

        return HealthResponse(
            status="healthy" if db_healthy else "degraded",
            version=settings.APP_VERSION,
            database="connected" if db_healthy else "disconnected",
        )

    @app.get(
        "/",
        tags=["Health"],
        summary="Root endpoint",
        description="API information.",
    )
    async def root() -> dict:
        return {
            "success": True,
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/docs" if settings.DEBUG else "Disabled in production",
            "health": "/health",
            "api": settings.API_PREFIX,
        }


# Create application instance
app = create_app()


# ==============================================================================
# DEVELOPMENT RUNNER
# ==============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
