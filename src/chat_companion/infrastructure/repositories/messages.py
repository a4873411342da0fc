from typing import Any

from chat_companion.core.base import ErrorLevel
from chat_companion.core.decorators import with_error_handling
from chat_companion.core.logging import get_logger
from chat_companion.domain.models.message import Message
from chat_companion.services import DocumentStore

logger = get_logger(__name__)


class MessageRepository:
    """Typed access to the ``messages`` collection.

    The pipeline never rewrites whole messages, only the annotation fields.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def get(self, message_id: str) -> Message | None:
        record = await self.store.get(Message.collection, message_id)
        return Message.from_document(record) if record else None

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def recent(self, chat_id: str, limit: int, exclude_id: str | None = None) -> list[Message]:
        """Up to ``limit`` newest messages in the chat, newest first."""
        if limit <= 0:
            return []
        filters: dict[str, Any] = {"chat_id": chat_id}
        if exclude_id is not None:
            filters["id__ne"] = exclude_id
        records = await self.store.find(
            Message.collection,
            filters,
            order_by="created_at",
            descending=True,
            limit=limit,
        )
        return [Message.from_document(r) for r in records]

    async def _annotate(self, message_id: str, fields: dict[str, Any]) -> None:
        await self.store.update(Message.collection, message_id, fields)
        logger.debug("Annotated message", extra={"message_id": message_id, "fields": sorted(fields)})

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def set_suggested_replies(self, message_id: str, replies: list[str]) -> None:
        await self._annotate(message_id, {"suggested_replies": replies})

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def set_reminder(self, message_id: str, reminder: str, context_entry_ids: list[str]) -> None:
        """Write the reminder with the ids of every entry it was built from.

        The ids land in the same write, so a redelivery can finish
        acknowledging them even if the acknowledgment itself failed.
        """
        fields: dict[str, Any] = {"reminder": reminder, "reminder_context_ids": context_entry_ids}
        if context_entry_ids:
            fields["context_entry_id"] = context_entry_ids[0]
        await self._annotate(message_id, fields)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def set_refined_message(self, message_id: str, refined: str) -> None:
        await self._annotate(message_id, {"refined_message": refined})
