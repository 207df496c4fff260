"""
Cadence Dashboard - FastAPI Application

Main entry point for the status API over learned patterns, suggestions,
check-ins and the nudge schedule.

Usage:
    uvicorn cadence.dashboard.main:app --host 127.0.0.1 --port 8080 --reload

    Or run directly:
    python -m cadence.dashboard.main
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime

# Load .env file before anything else
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cadence import __version__
from cadence.dashboard.models import ErrorResponse, HealthCheck
from cadence.dashboard.routes import api_router
from cadence.engagement import get_connection as get_engagement_db
from cadence.history import get_connection as get_history_db
from cadence.logging_config import get_logger, setup_logging


setup_logging()
logger = get_logger(__name__)

ALLOWED_ORIGINS = os.environ.get(
    "CADENCE_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

# Track startup time for uptime calculation
startup_time: datetime | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    global startup_time

    logger.info("dashboard_starting", version=__version__)
    startup_time = datetime.now()

    # Create tables up front so the first request does not pay for it
    for name, connect in (("history", get_history_db), ("engagement", get_engagement_db)):
        conn = connect()
        conn.close()
        logger.info("database_initialized", database=name)

    yield

    logger.info("dashboard_stopping")


# Create FastAPI application
app = FastAPI(
    title="Cadence Dashboard API",
    description="Behavioral patterns, task suggestions and adaptive scheduling",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Health Check Endpoint
# =============================================================================


@app.get("/api/health", response_model=HealthCheck, tags=["health"])
async def health_check():
    """Check that both databases answer."""
    services = {}

    for name, connect in (("history", get_history_db), ("engagement", get_engagement_db)):
        try:
            conn = connect()
            conn.execute("SELECT 1")
            conn.close()
            services[name] = "healthy"
        except Exception as e:
            logger.error("health_check_failed", database=name, error=str(e))
            services[name] = "unhealthy"

    overall = "healthy" if all(s == "healthy" for s in services.values()) else "degraded"
    return HealthCheck(
        status=overall, version=__version__, timestamp=datetime.now(), services=services
    )


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.detail, code=f"HTTP_{exc.status_code}").model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error("unhandled_exception", error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error", code="INTERNAL_ERROR").model_dump(),
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(api_router)


def get_uptime_seconds() -> int:
    if startup_time is None:
        return 0
    return int((datetime.now() - startup_time).total_seconds())


app.state.get_uptime = get_uptime_seconds


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("CADENCE_HOST", "127.0.0.1")
    port = int(os.environ.get("CADENCE_PORT", "8080"))

    uvicorn.run("cadence.dashboard.main:app", host=host, port=port, reload=True, log_level="info")
