from datetime import datetime

from chat_companion.core.base import ErrorLevel
from chat_companion.core.decorators import with_error_handling
from chat_companion.core.logging import get_logger
from chat_companion.domain.models.context import ContextEntry
from chat_companion.services import DocumentStore

logger = get_logger(__name__)


class ContextRepository:
    """Typed access to memory entries in the ``chat_context`` collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def add(self, chat_id: str, author_id: str, summary: str, source_message_id: str) -> ContextEntry:
        """Insert an unacknowledged entry; ``created_at`` comes from the store."""
        record = await self.store.create(
            ContextEntry.collection,
            {
                "chat_id": chat_id,
                "author_id": author_id,
                "summary": summary,
                "acknowledged": False,
                "source_message_id": source_message_id,
            },
            timestamp_field="created_at",
        )
        return ContextEntry.from_document(record)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def find_by_source(self, chat_id: str, source_message_id: str) -> ContextEntry | None:
        records = await self.store.find(
            ContextEntry.collection,
            {"chat_id": chat_id, "source_message_id": source_message_id},
            limit=1,
        )
        return ContextEntry.from_document(records[0]) if records else None

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def find_unacknowledged(self, chat_id: str, excluding_author: str, since: datetime) -> list[ContextEntry]:
        """Unacknowledged entries by other authors since ``since``, newest first."""
        records = await self.store.find(
            ContextEntry.collection,
            {
                "chat_id": chat_id,
                "author_id__ne": excluding_author,
                "created_at__gte": since.timestamp(),
                "acknowledged__ne": True,
            },
            order_by="created_at",
            descending=True,
        )
        return [ContextEntry.from_document(r) for r in records]

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def acknowledge(self, entry_ids: list[str]) -> None:
        for entry_id in entry_ids:
            await self.store.update(ContextEntry.collection, entry_id, {"acknowledged": True})
        logger.debug("Acknowledged context entries", extra={"count": len(entry_ids)})
