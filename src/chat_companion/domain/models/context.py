"""Memory entries derived from important messages."""

from datetime import datetime

from chat_companion.domain.models.base import Document


class ContextEntry(Document):
    """A summarised important message, eligible for one reminder.

    ``acknowledged`` only ever moves from False to True, when a reminder
    built from this entry has been delivered.
    """

    collection = "chat_context"

    chat_id: str
    author_id: str
    summary: str
    created_at: datetime
    acknowledged: bool = False
    source_message_id: str
