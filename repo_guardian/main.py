"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.
It sets up all routes and exception handlers.

Design Decisions:
- Use lifespan events for startup/shutdown
- Load and validate the App credentials at startup (fail-fast)
- Expose health check endpoints
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from repo_guardian import __version__
from repo_guardian.config import ConfigurationError, get_settings
from repo_guardian.logging_config import SERVICE_NAME, get_logger, setup_logging
from repo_guardian.services.github_auth import get_github_auth, load_private_key
from repo_guardian.webhook import router as webhook_router

# Initialize logging first
setup_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Refuses to start when the GitHub App credentials cannot be loaded.
    """
    settings = get_settings()
    logger.info(
        "Starting Repo Guardian",
        host=settings.host,
        port=settings.port,
        app_id=settings.github_app_id
    )

    try:
        get_github_auth()
    except ConfigurationError as e:
        logger.error("Configuration validation failed", error=str(e))
        raise

    logger.info("Configuration validated successfully")

    yield

    logger.info("Shutting down Repo Guardian")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Repo Guardian",
        description="Protects the default branch of newly created GitHub repositories",
        version=__version__,
        lifespan=lifespan
    )

    app.include_router(webhook_router)

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            event_type=request.headers.get("X-GitHub-Event"),
            delivery_id=request.headers.get("X-GitHub-Delivery"),
            error=str(exc),
            error_type=type(exc).__name__
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "type": type(exc).__name__
            }
        )

    @app.get("/")
    async def root():
        """Root endpoint with basic info."""
        return {
            "name": "Repo Guardian",
            "version": __version__,
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.

        Returns basic health status for load balancers and monitors.
        """
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": __version__
        }

    @app.get("/ready")
    async def readiness_check():
        """
        Readiness check endpoint.

        Re-reads the configured private key and verifies it still loads.
        """
        settings = get_settings()
        try:
            load_private_key(settings.get_private_key())
        except ConfigurationError as e:
            logger.error("Readiness check failed", error=str(e))
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Not ready: {e}"
            )

        return {
            "status": "ready",
            "service": SERVICE_NAME,
            "app_id": settings.github_app_id
        }

    return app


app = create_app()
