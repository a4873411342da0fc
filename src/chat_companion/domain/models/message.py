"""Chat and message records."""

from datetime import datetime

from pydantic import Field

from chat_companion.domain.models.base import Document


class Message(Document):
    """A chat message plus the annotations the pipeline attaches to it.

    Only ``text`` is edited by the sender after creation. ``suggested_replies``
    and ``refined_message`` are written at most once. ``created_at`` is required:
    a stored message without one fails validation.
    """

    collection = "messages"

    chat_id: str
    author_id: str
    text: str = ""
    created_at: datetime
    suggested_replies: list[str] | None = None
    refined_message: str | None = None
    reminder: str | None = None
    context_entry_id: str | None = Field(
        default=None, description="Memory entry surfaced by this message's reminder"
    )
    reminder_context_ids: list[str] | None = Field(
        default=None, description="Every memory entry shown to the model for the reminder"
    )

    def transcript_line(self) -> str:
        return f"{self.author_id}: {self.text}"


class Chat(Document):
    """A conversation between participants. Read-only to the pipeline."""

    collection = "chats"

    participants: list[str] = Field(default_factory=list)
    last_message: str | None = None
    updated_at: datetime | None = None

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants
