"""Surfaces earlier memories as a reminder on a new message."""

from chat_companion.core.config import PipelineConfig
from chat_companion.core.logging import get_logger
from chat_companion.domain.formatting import clip
from chat_companion.domain.models.message import Message
from chat_companion.domain.models.oracle import text_or_empty
from chat_companion.infrastructure.repositories.context import ContextRepository
from chat_companion.infrastructure.repositories.messages import MessageRepository
from chat_companion.services import TextOracle
from chat_companion.services.context_retriever import ContextWindowRetriever, render_transcript
from chat_companion.services.prompts import build_reminder_prompt

logger = get_logger(__name__)


class ReminderOrchestrator:
    """Decides whether a new message gets a reminder and acknowledges what it used.

    Every entry shown to the model is acknowledged once a reminder is written,
    so no memory ever produces a second reminder.
    """

    def __init__(
        self,
        retriever: ContextWindowRetriever,
        oracle: TextOracle,
        contexts: ContextRepository,
        messages: MessageRepository,
        config: PipelineConfig,
    ):
        self.retriever = retriever
        self.oracle = oracle
        self.contexts = contexts
        self.messages = messages
        self.config = config

    async def process(self, message: Message) -> str | None:
        """Attach a reminder to ``message`` if earlier context calls for one.

        Returns the reminder written, or None. Oracle failures mean no
        reminder; store failures propagate.
        """
        if message.reminder:
            # A redelivery after a failed acknowledgment finishes it here
            if message.reminder_context_ids:
                await self.contexts.acknowledge(message.reminder_context_ids)
            logger.debug("Message already has a reminder", extra={"message_id": message.id})
            return None

        entries = await self.retriever.fetch_window(message.chat_id, message.author_id)
        if not entries:
            return None

        prompt = build_reminder_prompt(
            render_transcript(entries), message.text, self.config.max_suggestion_length
        )
        result = await self.oracle.generate(prompt)
        reminder = text_or_empty(result)
        if not reminder:
            logger.info(
                "No reminder produced",
                extra={"message_id": message.id, "candidates": len(entries), "oracle_ok": result.ok},
            )
            return None

        reminder = clip(reminder, self.config.max_suggestion_length)
        entry_ids = [e.id for e in entries]
        await self.messages.set_reminder(message.id, reminder, entry_ids)
        await self.contexts.acknowledge(entry_ids)

        logger.info(
            "Reminder attached",
            extra={"message_id": message.id, "acknowledged": len(entries)},
        )
        return reminder
