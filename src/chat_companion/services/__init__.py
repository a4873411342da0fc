"""Service layer interfaces and implementations."""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from chat_companion.domain.models.oracle import OracleFailure, OracleSuccess

Clock = Callable[[], datetime]


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for the document store the pipeline persists to.

    Filters use the ``field`` / ``field__op`` syntax (``ne``, ``gte``, ``lte``,
    ``gt``, ``lt``, ``in``, ``contains``, ``startswith``).
    """

    async def find(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return matching documents in the requested order."""
        ...

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Return one document or None."""
        ...

    async def create(
        self,
        collection: str,
        data: dict[str, Any],
        *,
        timestamp_field: str | None = "created_at",
    ) -> dict[str, Any]:
        """Insert a document; id and timestamp are assigned by the store."""
        ...

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Set only ``fields`` on an existing document."""
        ...


@runtime_checkable
class TextOracle(Protocol):
    """Protocol for generative text models. Never raises."""

    async def generate(self, prompt: str) -> OracleSuccess | OracleFailure:
        ...


__all__ = ["Clock", "DocumentStore", "TextOracle"]
