"""Change events delivered for chat messages."""

from typing import ClassVar

from pydantic import BaseModel

from chat_companion.domain.models.message import Message


class MessageEvent(BaseModel):
    name: ClassVar[str]


class MessageCreated(MessageEvent):
    name = "message.created"

    message: Message


class MessageUpdated(MessageEvent):
    """Before and after snapshots of an edited message."""

    name = "message.updated"

    before: Message
    after: Message

    @property
    def message(self) -> Message:
        return self.after

    @property
    def text_changed(self) -> bool:
        return self.before.text != self.after.text
