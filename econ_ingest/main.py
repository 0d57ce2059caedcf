"""
Main FastAPI application.

Hosts the sync runtime: builds it on startup, starts the background
scheduler when enabled, and tears everything down on shutdown.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from econ_ingest.core.config import get_settings
from econ_ingest.core.database import get_db
from econ_ingest.core.logging_config import configure_logging
from econ_ingest.core.runtime import build_runtime

# Configure logging
configure_logging(logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Runs on startup and shutdown.
    """
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting Economic Indicator Ingestion Service")
    logger.info(f"Log level: {settings.log_level}")

    runtime = await build_runtime(settings)
    app.state.runtime = runtime

    if settings.scheduler_enabled:
        runtime.scheduler.start()
    else:
        logger.info("Scheduler disabled by configuration")

    yield

    # Shutdown
    logger.info("Shutting down")
    await runtime.close()


app = FastAPI(
    title="Economic Indicator Ingestion Service",
    description="Scheduled ingestion of economic indicators from public data providers",
    version="0.1.0",
    lifespan=lifespan
)


@app.get("/")
def root(request: Request):
    """Root endpoint with service info."""
    runtime = request.app.state.runtime
    return {
        "service": "Economic Indicator Ingestion Service",
        "version": "0.1.0",
        "sources": runtime.factory.available_sources(),
        "unavailable_sources": runtime.factory.unavailable_sources(),
        "docs": "/docs"
    }


@app.get("/health")
def health_check(request: Request):
    """
    Health check endpoint.

    Returns status of the service, database connectivity and scheduler.
    """
    runtime = request.app.state.runtime
    health_status = {
        "status": "healthy",
        "service": "running",
        "database": "unknown",
        "scheduler": "running" if runtime.scheduler.is_running else "stopped",
    }

    # Check database connectivity
    try:
        for db in get_db(runtime.session_factory):
            db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except SQLAlchemyError as e:
        health_status["status"] = "degraded"
        health_status["database"] = f"error: {e.__class__.__name__}"
        logger.warning(f"Database health check failed: {e}")

    return health_status
