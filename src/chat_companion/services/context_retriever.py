"""Reads the reminder-eligible memory window for a chat."""

from datetime import timedelta

from chat_companion.core.config import PipelineConfig
from chat_companion.domain.formatting import format_timestamp
from chat_companion.domain.models.context import ContextEntry
from chat_companion.domain.models.utils import utc_now
from chat_companion.infrastructure.repositories.context import ContextRepository
from chat_companion.services import Clock


def render_transcript(entries: list[ContextEntry]) -> str:
    """One newline-terminated line per entry, in the given order."""
    return "".join(
        f"On {format_timestamp(e.created_at)}, {e.author_id} mentioned: {e.summary}\n" for e in entries
    )


class ContextWindowRetriever:
    """Finds unacknowledged memories left by the other participants.

    Entries authored by the requesting user, older than the window or already
    acknowledged are never returned.
    """

    def __init__(self, repository: ContextRepository, config: PipelineConfig, clock: Clock = utc_now):
        self.repository = repository
        self.config = config
        self.clock = clock

    async def fetch_window(self, chat_id: str, requesting_user_id: str) -> list[ContextEntry]:
        """Eligible entries, newest first."""
        since = self.clock() - timedelta(days=self.config.context_window_days)
        return await self.repository.find_unacknowledged(chat_id, requesting_user_id, since)

    async def retrieve(self, chat_id: str, requesting_user_id: str) -> str:
        """Transcript of eligible entries; empty string when there are none."""
        return render_transcript(await self.fetch_window(chat_id, requesting_user_id))
