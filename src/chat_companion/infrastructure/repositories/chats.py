from chat_companion.core.base import ErrorLevel
from chat_companion.core.decorators import with_error_handling
from chat_companion.domain.models.message import Chat
from chat_companion.services import DocumentStore


class ChatRepository:
    """Read-only access to chats, used for participant checks."""

    def __init__(self, store: DocumentStore):
        self.store = store

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def get(self, chat_id: str) -> Chat | None:
        record = await self.store.get(Chat.collection, chat_id)
        return Chat.from_document(record) if record else None
