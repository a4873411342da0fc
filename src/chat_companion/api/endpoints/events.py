"""Webhooks through which a change-feed runtime delivers message events.

The call returns once every handler has finished. A failed store write
answers 503 so the runtime retries; handlers are safe to run again.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chat_companion.api.dependencies import get_event_bus, verify_webhook_secret
from chat_companion.core.errors import StoreError
from chat_companion.domain.models.message import Message
from chat_companion.events.bus import EventBus, HandlerOutcome
from chat_companion.events.handlers import handle_message_created, handle_message_updated

router = APIRouter(dependencies=[Depends(verify_webhook_secret)])


class MessageCreatedPayload(BaseModel):
    message: Message


class MessageUpdatedPayload(BaseModel):
    before: Message
    after: Message


class HandlerReport(BaseModel):
    handler: str
    ok: bool
    error: str | None = None


class DispatchReport(BaseModel):
    event: str
    handlers: list[HandlerReport]


def _report(event: str, outcomes: list[HandlerOutcome]) -> DispatchReport:
    for outcome in outcomes:
        if isinstance(outcome.error, StoreError):
            raise outcome.error
    return DispatchReport(
        event=event,
        handlers=[
            HandlerReport(handler=o.handler, ok=o.ok, error=str(o.error) if o.error else None)
            for o in outcomes
        ],
    )


@router.post("/message-created", response_model=DispatchReport)
async def message_created(
    payload: MessageCreatedPayload,
    bus: EventBus = Depends(get_event_bus),
) -> DispatchReport:
    outcomes = await handle_message_created(bus, payload.message)
    return _report("message.created", outcomes)


@router.post("/message-updated", response_model=DispatchReport)
async def message_updated(
    payload: MessageUpdatedPayload,
    bus: EventBus = Depends(get_event_bus),
) -> DispatchReport:
    outcomes = await handle_message_updated(bus, payload.before, payload.after)
    return _report("message.updated", outcomes)
