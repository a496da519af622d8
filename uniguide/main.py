"""
UniGuide Prediction Backend - FastAPI Application

Hosts the event-driven admission prediction pipeline. The HTTP surface is
limited to health reporting; work arrives over Redis pub/sub.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from uniguide.config.settings import settings, validate_required_settings
from uniguide.container import build_container
from uniguide.infrastructure.db.database import check_db, close_db, init_db
from uniguide.infrastructure.exceptions import (
    NotFoundError,
    UniGuideError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"UniGuide prediction backend starting in {settings.environment} mode...")

    validate_required_settings()

    await init_db()
    logger.info("Database connection pool initialized")

    container = build_container()
    app.state.container = container
    await container.subscriber.start()

    yield

    await container.close()
    await close_db()
    logger.info("UniGuide prediction backend shutting down...")


app = FastAPI(
    title="UniGuide Prediction Backend",
    description="Event-driven admission prediction pipeline",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return JSONResponse(
        status_code=404,
        content=exc.to_dict(),
    )


@app.exception_handler(UniGuideError)
async def general_error_handler(request: Request, exc: UniGuideError):
    """Handle all other application errors."""
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check(request: Request):
    """Reachability of the database, Redis and the prediction service."""
    container = request.app.state.container
    checks = {
        "database": await check_db(),
        "redis": await container.redis_ok(),
        "prediction_service": await container.prediction_client.health_check(),
        "subscriber": container.subscriber.is_running,
    }
    healthy = all(checks.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "degraded",
            "service": "uniguide-prediction",
            "checks": checks,
        },
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "UniGuide Prediction Backend",
        "version": "1.0.0",
        "docs": "/docs",
    }
