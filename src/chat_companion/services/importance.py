"""Decides whether a message is worth remembering."""

from collections.abc import Iterable

from chat_companion.core.config import DEFAULT_TRIGGER_PHRASES


class ImportanceClassifier:
    """Case-insensitive trigger phrase match. Pure and total."""

    def __init__(self, trigger_phrases: Iterable[str] = DEFAULT_TRIGGER_PHRASES):
        self.trigger_phrases = tuple(p.strip().lower() for p in trigger_phrases if p and p.strip())

    def is_important(self, text: str) -> bool:
        lowered = text.lower()
        return any(phrase in lowered for phrase in self.trigger_phrases)

    def matched_phrases(self, text: str) -> list[str]:
        lowered = text.lower()
        return [phrase for phrase in self.trigger_phrases if phrase in lowered]
