"""
Review Gate - Main Application
===============================

Risk scoring and SLA tracking for AI-generated QA artifacts awaiting
human review.

Modules:
- Risk Assessment: Score artifacts and derive approval requirements
- SLA Tracking: Review deadlines, status lifecycle and escalation

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, YAML defaults, notification sinks
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

# Configuration and Core
from review_gate.config import settings
from review_gate.core import ApplicationException

# Infrastructure
from review_gate.infrastructure.database import (
    close_database,
    create_tables,
    get_engine,
    init_database,
)

# Module Routers
from review_gate.risk.interfaces import risk_router
from review_gate.sla.interfaces import sla_router

# Shared
from review_gate.shared.api import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from review_gate.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database
    3. Create database tables

    SHUTDOWN:
    1. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Review Gate", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    init_database()

    # Create tables (for development - use migrations in production)
    try:
        await create_tables()
    except Exception as e:
        logger.warning(
            "Database not available - running in degraded mode",
            extra={"error": str(e)}
        )

    app.state.settings = settings
    logger.info("Review Gate started")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Review Gate")
    await close_database()
    logger.info("Review Gate shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Review Gate API",
    description="""
    ## Human-in-the-loop review gate for AI-generated QA artifacts

    ### Risk Assessment

    - `POST /approvals/risk/assess` - Score an artifact and get its approval requirements
    - `GET /approvals/settings/{project_id}` - Effective approval settings
    - `PUT /approvals/settings/{project_id}` - Update thresholds, SLA hours and policies

    ### SLA Tracking

    - `POST /sla/{artifact_id}` - Start the review deadline
    - `GET /sla/{artifact_id}` - Live status
    - `GET /sla/approaching`, `GET /sla/breached` - Review queues
    - `POST /sla/{artifact_id}/escalate`, `POST /sla/{artifact_id}/complete`
    - `GET /sla/metrics/{project_id}` - Compliance rollup
    - `POST /sla/evaluate` - Sweep open SLAs (call from an external scheduler)

    **Default SLA windows:** low 1h, medium 4h, high 24h, critical 48h.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
# Added last runs first: correlation id must be set before request logging
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(risk_router)
app.include_router(sla_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {"database": "connected"}
                }
            }
        }
    }
})
async def health_check():
    """
    Health check endpoint for load balancers and orchestrators.

    Reports degraded when the database cannot be reached.
    """
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        database = "connected"
    except Exception as e:
        logger.warning("Health check database probe failed", extra={"error": str(e)})
        database = "unavailable"

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {"database": database}
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health"
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "review_gate.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower()
    )
