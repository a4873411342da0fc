"""Turns important messages into memory entries."""

from chat_companion.core.config import PipelineConfig
from chat_companion.core.logging import get_logger
from chat_companion.domain.formatting import summarize
from chat_companion.domain.models.context import ContextEntry
from chat_companion.infrastructure.repositories.context import ContextRepository
from chat_companion.services.importance import ImportanceClassifier

logger = get_logger(__name__)


class ContextRecorder:
    def __init__(
        self,
        classifier: ImportanceClassifier,
        repository: ContextRepository,
        config: PipelineConfig,
    ):
        self.classifier = classifier
        self.repository = repository
        self.config = config

    async def record(self, chat_id: str, author_id: str, text: str, message_id: str) -> ContextEntry | None:
        """Store a summary of an important message.

        Returns the new entry, the entry already recorded for ``message_id``
        on a repeated delivery, or None when the message is not important.
        Store failures propagate.
        """
        if not self.classifier.is_important(text):
            return None

        existing = await self.repository.find_by_source(chat_id, message_id)
        if existing is not None:
            logger.info("Context already recorded", extra={"entry_id": existing.id, "message_id": message_id})
            return existing

        entry = await self.repository.add(
            chat_id=chat_id,
            author_id=author_id,
            summary=summarize(text, self.config.summary_max_length),
            source_message_id=message_id,
        )
        logger.info(
            "Recorded context entry",
            extra={"entry_id": entry.id, "message_id": message_id, "chat_id": chat_id},
        )
        return entry
