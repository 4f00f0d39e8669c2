"""
FastAPI application for Leadlens.
"""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded

from core.config import get_config
from core.logger import get_logger, setup_logging
from modules.engagement.dispatch import drain_background_tasks
from modules.engagement.store import get_profile_store
from api.routes import events, leads, gate, metrics
from api.middleware.error_handler import (
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    api_error_handler,
    APIError
)
from api.middleware.rate_limit import limiter, rate_limit_handler

logger = get_logger(__name__)
config = get_config()

VERSION = "1.0.0"

app = FastAPI(
    title="Leadlens API",
    description="Engagement scoring and readiness classification for pricing estimates",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# CORS middleware: event producers are browsers on other origins
cors_origins = os.getenv("CORS_ORIGINS").split(",") if os.getenv("CORS_ORIGINS") else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(APIError, api_error_handler)

# Include routers
app.include_router(events.router, prefix="/api/v1/events", tags=["events"])
app.include_router(leads.router, prefix="/api/v1/leads", tags=["leads"])
app.include_router(gate.router, prefix="/api/v1/gate", tags=["gate"])
app.include_router(metrics.router, prefix="/api/v1/metrics", tags=["metrics"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Leadlens API",
        "version": VERSION,
        "description": "Engagement scoring and readiness classification",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """
    Health check endpoint with detailed status.

    Returns:
        Health status including profile store connectivity
    """
    health_status = {
        "status": "healthy",
        "version": VERSION,
        "services": {}
    }

    try:
        get_profile_store().get("__health_check__")
        health_status["services"]["profile_store"] = {
            "status": "healthy",
            "backend": config.engagement_store
        }
    except Exception as e:
        logger.error("Profile store health check failed", error=str(e))
        health_status["status"] = "degraded"
        health_status["services"]["profile_store"] = {
            "status": "unhealthy",
            "backend": config.engagement_store,
            "error": str(e)[:100]
        }

    health_status["services"]["config"] = {
        "status": "healthy",
        "environment": config.environment
    }

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.on_event("startup")
async def startup_event():
    """Startup event."""
    setup_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        enable_file_logging=bool(config.log_file)
    )
    logger.info("Starting Leadlens API", store=config.engagement_store)


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown event."""
    logger.info("Shutting down Leadlens API")
    await drain_background_tasks()
