"""Pure text helpers shared by the pipeline services."""

import re
from datetime import datetime

from chat_companion.domain.models.utils import as_utc

ELLIPSIS = "..."
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"

_ENUMERATION_PREFIX = re.compile(r"^\d+\.\s*")


def summarize(text: str, cap: int) -> str:
    """Cut ``text`` to ``cap`` characters plus an ellipsis when it is longer than ``cap``."""
    if len(text) <= cap:
        return text
    return text[:cap] + ELLIPSIS


def clip(text: str, limit: int) -> str:
    """Bound ``text`` to at most ``limit`` characters."""
    text = text.strip()
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[:limit]
    return text[: limit - len(ELLIPSIS)].rstrip() + ELLIPSIS


def format_timestamp(value: datetime) -> str:
    return as_utc(value).strftime(TIMESTAMP_FORMAT)


def parse_suggested_replies(raw: str) -> list[str]:
    """Split a model response into replies.

    Blank lines are dropped and a leading ``"<digits>."`` enumeration is removed.

    >>> parse_suggested_replies("1. Sure thing\\n\\n2. Sounds good\\nNo numbering here\\n")
    ['Sure thing', 'Sounds good', 'No numbering here']
    """
    replies = []
    for line in raw.split("\n"):
        if not line.strip():
            continue
        reply = _ENUMERATION_PREFIX.sub("", line.strip()).strip()
        if reply:
            replies.append(reply)
    return replies
