"""Bindings from message events to pipeline services.

Deliveries are at-least-once, so each handler re-reads the stored message and
skips work whose result is already there.
"""

from functools import partial

from chat_companion.core.logging import get_logger, log_context
from chat_companion.domain.models.message import Message
from chat_companion.events.bus import EventBus, HandlerOutcome
from chat_companion.events.models import MessageCreated, MessageUpdated
from chat_companion.services.pipeline import ChatPipeline

logger = get_logger(__name__)


async def _stored(pipeline: ChatPipeline, message: Message) -> Message | None:
    stored = await pipeline.messages.get(message.id)
    if stored is None:
        logger.warning("Message not found in store, skipping", extra={"message_id": message.id})
    return stored


async def record_context(pipeline: ChatPipeline, event: MessageCreated) -> None:
    message = event.message
    with log_context(chat_id=message.chat_id, message_id=message.id, handler="record_context"):
        await pipeline.recorder.record(message.chat_id, message.author_id, message.text, message.id)


async def attach_suggested_replies(pipeline: ChatPipeline, event: MessageCreated) -> None:
    message = event.message
    with log_context(chat_id=message.chat_id, message_id=message.id, handler="attach_suggested_replies"):
        stored = await _stored(pipeline, message)
        if stored is None or stored.suggested_replies:
            return

        replies = await pipeline.suggestions.generate(message.text)
        if not replies:
            return
        await pipeline.messages.set_suggested_replies(message.id, replies)
        logger.info("Suggested replies attached", extra={"count": len(replies)})


async def attach_reminder(pipeline: ChatPipeline, event: MessageCreated) -> None:
    message = event.message
    with log_context(chat_id=message.chat_id, message_id=message.id, handler="attach_reminder"):
        stored = await _stored(pipeline, message)
        if stored is None:
            return
        await pipeline.reminders.process(stored)


async def attach_refinement(pipeline: ChatPipeline, event: MessageUpdated) -> None:
    after = event.after
    with log_context(chat_id=after.chat_id, message_id=after.id, handler="attach_refinement"):
        if not event.text_changed or after.refined_message:
            return

        stored = await _stored(pipeline, after)
        if stored is None or stored.refined_message:
            return

        refined = await pipeline.refinement.refine(after.chat_id, after.text, exclude_message_id=after.id)
        if refined:
            await pipeline.messages.set_refined_message(after.id, refined)
            logger.info("Refined message attached")


def register_pipeline_handlers(bus: EventBus, pipeline: ChatPipeline) -> EventBus:
    """Subscribe the creation and update handlers for ``pipeline`` on ``bus``."""
    for handler in (record_context, attach_suggested_replies, attach_reminder):
        bus.subscribe(MessageCreated, partial(handler, pipeline))
    bus.subscribe(MessageUpdated, partial(attach_refinement, pipeline))
    return bus


async def handle_message_created(bus: EventBus, message: Message) -> list[HandlerOutcome]:
    """Entry point for a created message: run all creation handlers and wait."""
    return await bus.dispatch(MessageCreated(message=message))


async def handle_message_updated(bus: EventBus, before: Message, after: Message) -> list[HandlerOutcome]:
    """Entry point for an edited message: run the refinement handler and wait."""
    return await bus.dispatch(MessageUpdated(before=before, after=after))
