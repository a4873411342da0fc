"""Domain models for the chat companion pipeline."""

from .base import Document
from .context import ContextEntry
from .message import Chat, Message
from .oracle import OracleFailure, OracleResult, OracleSuccess, text_or_empty
from .utils import as_utc, utc_now

__all__ = [
    "Chat",
    "ContextEntry",
    "Document",
    "Message",
    "OracleFailure",
    "OracleResult",
    "OracleSuccess",
    "as_utc",
    "text_or_empty",
    "utc_now",
]
