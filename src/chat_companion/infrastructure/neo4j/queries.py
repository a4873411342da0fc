"""Centralized query definitions.

This is the single place Cypher for the document store is written. Labels
and property names are validated before they are spliced into a query;
everything else travels as a parameter.
"""

from typing import Any, LiteralString, cast

from chat_companion.infrastructure.neo4j.filter_compiler import check_identifier, compile_filters

COLLECTION_LABELS: dict[str, str] = {
    "messages": "Message",
    "chats": "Chat",
    "chat_context": "ChatContext",
}


def label_for(collection: str) -> str:
    try:
        return COLLECTION_LABELS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection!r}") from None


class DocumentQueries:
    """All document-store queries in one place."""

    @staticmethod
    def get_by_id(collection: str) -> tuple[LiteralString, dict[str, Any]]:
        query = f"MATCH (d:{label_for(collection)} {{id: $id}}) RETURN d LIMIT 1"
        return cast(LiteralString, query), {}

    @staticmethod
    def find(
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> tuple[LiteralString, dict[str, Any]]:
        """Filtered, ordered and limited lookup.

        Returns:
            Tuple of (query, params)
        """
        where, params = compile_filters(filters, alias="d")
        parts = [f"MATCH (d:{label_for(collection)})"]
        if where:
            parts.append(where)
        parts.append("RETURN d")
        if order_by:
            direction = "DESC" if descending else "ASC"
            parts.append(f"ORDER BY d.{check_identifier(order_by)} {direction}")
        if limit is not None:
            parts.append("LIMIT $limit")
            params["limit"] = int(limit)
        return cast(LiteralString, " ".join(parts)), params

    @staticmethod
    def create(collection: str, timestamp_field: str | None = "created_at") -> tuple[LiteralString, dict[str, Any]]:
        """Create a node; the timestamp field is taken from the database clock.

        Expects ``$id`` and ``$properties`` parameters.
        """
        query = f"CREATE (d:{label_for(collection)}) SET d = $properties, d.id = $id"
        if timestamp_field:
            query += f", d.{check_identifier(timestamp_field)} = timestamp() / 1000.0"
        query += " RETURN d"
        return cast(LiteralString, query), {}

    @staticmethod
    def update(collection: str, fields: dict[str, Any]) -> tuple[LiteralString, dict[str, Any]]:
        """Partial update; only the given properties are touched.

        Expects an ``$id`` parameter.
        """
        for name in fields:
            check_identifier(name)
        query = f"MATCH (d:{label_for(collection)} {{id: $id}}) SET d += $fields RETURN d"
        return cast(LiteralString, query), {"fields": fields}

    @staticmethod
    def ensure_constraints() -> list[LiteralString]:
        """Uniqueness constraints on document ids, one per label."""
        return [
            cast(
                LiteralString,
                f"CREATE CONSTRAINT {label.lower()}_id IF NOT EXISTS "
                f"FOR (d:{label}) REQUIRE d.id IS UNIQUE",
            )
            for label in COLLECTION_LABELS.values()
        ]
