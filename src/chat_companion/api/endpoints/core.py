"""Core API endpoints."""

from fastapi import APIRouter

from chat_companion.api import dependencies
from chat_companion.domain.models.utils import utc_now

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint with application status."""
    return {
        "message": "Chat Companion API",
        "version": "0.1.0",
        "status": "running",
        "features": [
            "context_memory",
            "reminders",
            "suggested_replies",
            "refinement",
        ],
    }


@router.get("/health", operation_id="health")
async def health_check():
    """Health check endpoint."""
    ready = dependencies.pipeline is not None and dependencies.event_bus is not None
    return {
        "status": "healthy" if ready else "starting",
        "in_flight_handlers": dependencies.event_bus.in_flight if dependencies.event_bus else 0,
        "timestamp": utc_now().isoformat(),
    }
