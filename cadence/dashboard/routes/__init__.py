"""Dashboard API Routes Package

This module aggregates all route handlers into a single router
that can be included in the main FastAPI application.
"""

from fastapi import APIRouter

from .checkins import router as checkins_router
from .nudges import router as nudges_router
from .patterns import router as patterns_router
from .suggestions import router as suggestions_router


# Create main API router
api_router = APIRouter(prefix="/api")

# Include all sub-routers
api_router.include_router(patterns_router, prefix="/patterns", tags=["patterns"])
api_router.include_router(suggestions_router, prefix="/suggestions", tags=["suggestions"])
api_router.include_router(checkins_router, prefix="/check-ins", tags=["check-ins"])
api_router.include_router(nudges_router, prefix="/nudges", tags=["nudges"])

__all__ = ["api_router"]
