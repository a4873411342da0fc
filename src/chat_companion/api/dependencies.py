"""API dependencies."""

import secrets

from fastapi import Header

from chat_companion.core.base import ServiceErrorDetails
from chat_companion.core.config import settings
from chat_companion.core.errors import AuthenticationError, ServiceError
from chat_companion.events.bus import EventBus
from chat_companion.services.pipeline import ChatPipeline

# These will be set by the main.py lifespan
pipeline: ChatPipeline | None = None
event_bus: EventBus | None = None


def _not_ready(component: str) -> ServiceError:
    return ServiceError(
        f"{component} not initialized",
        details=ServiceErrorDetails(source="api.dependencies", operation="resolve", service_name=component),
    )


def get_pipeline() -> ChatPipeline:
    if pipeline is None:
        raise _not_ready("pipeline")
    return pipeline


def get_event_bus() -> EventBus:
    if event_bus is None:
        raise _not_ready("event_bus")
    return event_bus


async def verify_webhook_secret(x_webhook_secret: str | None = Header(default=None)) -> None:
    """Require the shared webhook secret when one is configured."""
    expected = settings.webhook_secret
    if not expected:
        return
    if not x_webhook_secret or not secrets.compare_digest(x_webhook_secret, expected):
        raise AuthenticationError(
            "Invalid webhook secret", details={"source": "api.dependencies", "operation": "verify_webhook"}
        )
