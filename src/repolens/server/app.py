"""FastAPI application for the repository analysis service."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from repolens.server.api import get_registry, router as api_router
from repolens.server.config import get_settings


# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(f"Starting RepoLens server on {settings.host}:{settings.port}")
    logger.info(f"LLM Provider: {settings.llm_provider}")
    yield
    cancelled = get_registry().cancel_all()
    logger.info(f"Shutting down RepoLens server, cancelled {cancelled} running analyses")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="RepoLens",
        description="LLM-assisted code review and GitHub issue triage for repositories",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Root endpoint with app info."""
        return {
            "name": "RepoLens",
            "version": "0.1.0",
            "description": "Repository analysis service",
            "status": "running",
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(api_router)

    return app


# Create default app instance
app = create_app()
