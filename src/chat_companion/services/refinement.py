"""Politeness-refined rephrasing of a message."""

from chat_companion.core.config import PipelineConfig
from chat_companion.core.logging import get_logger
from chat_companion.domain.models.oracle import text_or_empty
from chat_companion.infrastructure.repositories.messages import MessageRepository
from chat_companion.services import TextOracle
from chat_companion.services.prompts import build_refinement_prompt

logger = get_logger(__name__)


class RefinementGenerator:
    def __init__(self, messages: MessageRepository, oracle: TextOracle, config: PipelineConfig):
        self.messages = messages
        self.oracle = oracle
        self.config = config

    async def transcript(self, chat_id: str, exclude_message_id: str | None = None) -> str:
        """The most recent messages in the chat, oldest first, as ``author: text`` lines."""
        recent = await self.messages.recent(
            chat_id, self.config.refinement_context_size, exclude_id=exclude_message_id
        )
        return "\n".join(m.transcript_line() for m in reversed(recent))

    async def refine(self, chat_id: str, text: str, exclude_message_id: str | None = None) -> str | None:
        """Rephrase ``text`` in light of the recent conversation.

        Returns None when the model fails or answers with nothing. Store
        failures propagate.
        """
        transcript = await self.transcript(chat_id, exclude_message_id)
        result = await self.oracle.generate(build_refinement_prompt(transcript, text))
        refined = text_or_empty(result)
        if not refined:
            logger.info("No refinement produced", extra={"chat_id": chat_id, "oracle_ok": result.ok})
            return None
        return refined
