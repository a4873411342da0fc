"""API module."""

from fastapi import APIRouter

from .endpoints import core, events, refinement

router = APIRouter()

# Include endpoint routers
router.include_router(core.router)
router.include_router(refinement.router, prefix="/api/v1/refinements", tags=["refinement"])
router.include_router(events.router, prefix="/api/v1/events", tags=["events"])
