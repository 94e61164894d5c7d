"""HTTP server for the deploy action."""

import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from deploy_web import __version__
from deploy_web.api.actions import router as actions_router
from deploy_web.api.health import router as health_router
from deploy_web.api.middleware import (
    setup_error_handling,
    setup_logging_middleware,
    setup_metrics_middleware,
)
from deploy_web.core.config import Settings
from deploy_web.deploy.pipeline import DeployPipeline, create_pipeline
from deploy_web.utils.logging import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = app.state.settings
    logger.info(
        "Starting Deploy Web",
        version=__version__,
        preinstalled_dir=settings.preinstalled_dir,
        scratch_dir=settings.scratch_dir,
        wskdeploy=settings.wskdeploy_path,
    )
    yield
    logger.info("Shutting down Deploy Web")


def create_app(settings: Optional[Settings] = None, pipeline: Optional[DeployPipeline] = None) -> FastAPI:
    """Create FastAPI application."""
    if settings is None:
        settings = Settings()

    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Deploy Web",
        version=__version__,
        description="Deploy an OpenWhisk manifest straight from a git repository",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.pipeline = pipeline or create_pipeline(settings)

    setup_error_handling(app)
    setup_logging_middleware(app)
    setup_metrics_middleware(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(actions_router, tags=["actions"])

    if settings.metrics_enabled:
        metrics_app = make_asgi_app()
        app.mount("/metrics", metrics_app)

    return app


def run(settings: Optional[Settings] = None):
    """Run the application."""
    settings = settings or Settings()

    def handle_sigterm(signum, frame):
        logger.info("Received SIGTERM, initiating graceful shutdown")
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_sigterm)

    config = uvicorn.Config(
        "deploy_web.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        log_config=None,  # We handle logging ourselves
        access_log=False,  # Handled by middleware
    )

    server = uvicorn.Server(config)
    server.run()


if __name__ == "__main__":
    run()
