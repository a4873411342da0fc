"""Neo4j implementation of the DocumentStore protocol.

Every collection is a node label; every document is a node whose properties
are the document fields.
"""

from typing import Any
from uuid import uuid4

from neo4j import AsyncDriver, AsyncSession
from neo4j.exceptions import DriverError, Neo4jError

from chat_companion.core.base import DatabaseErrorDetails, ErrorCode
from chat_companion.core.decorators import with_session
from chat_companion.core.errors import StoreError
from chat_companion.core.logging import get_logger
from chat_companion.infrastructure.neo4j.queries import DocumentQueries

logger = get_logger(__name__)


def _store_error(
    e: Exception,
    operation: str,
    collection: str,
    document_id: str | None = None,
    code: ErrorCode = ErrorCode.DB_QUERY,
) -> StoreError:
    return StoreError(
        f"Neo4j {operation} on {collection} failed: {e}",
        details=DatabaseErrorDetails(
            source="Neo4jDocumentStore",
            operation=operation,
            service_name="neo4j",
            query_type=operation,
            collection=collection,
            document_id=document_id,
        ),
        code=code,
    )


class Neo4jDocumentStore:
    """Document store backed by a Neo4j driver."""

    def __init__(self, driver: AsyncDriver):
        self.driver = driver

    @with_session()
    async def find(
        self,
        session: AsyncSession,
        collection: str,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        try:
            query, params = DocumentQueries.find(collection, filters, order_by, descending, limit)
        except ValueError as e:
            raise _store_error(e, "find", collection) from e

        logger.debug("Executing Neo4j find", extra={"query": query, "params": params})
        try:
            result = await session.run(query, parameters=params)
            return [dict(record["d"]) async for record in result]
        except (Neo4jError, DriverError) as e:
            raise _store_error(e, "find", collection) from e

    @with_session()
    async def get(self, session: AsyncSession, collection: str, document_id: str) -> dict[str, Any] | None:
        try:
            query, _ = DocumentQueries.get_by_id(collection)
            result = await session.run(query, parameters={"id": document_id})
            record = await result.single(strict=False)
        except ValueError as e:
            raise _store_error(e, "get", collection, document_id) from e
        except (Neo4jError, DriverError) as e:
            raise _store_error(e, "get", collection, document_id) from e
        return dict(record["d"]) if record else None

    @with_session()
    async def create(
        self,
        session: AsyncSession,
        collection: str,
        data: dict[str, Any],
        *,
        timestamp_field: str | None = "created_at",
    ) -> dict[str, Any]:
        """Insert a document with a generated id and, optionally, a server timestamp."""
        document_id = str(data.get("id") or uuid4())
        properties = {k: v for k, v in data.items() if k != "id" and k != timestamp_field and v is not None}
        try:
            query, _ = DocumentQueries.create(collection, timestamp_field)
            result = await session.run(query, parameters={"id": document_id, "properties": properties})
            record = await result.single(strict=True)
        except ValueError as e:
            raise _store_error(e, "create", collection, document_id, ErrorCode.DB_OPERATION) from e
        except (Neo4jError, DriverError) as e:
            raise _store_error(e, "create", collection, document_id, ErrorCode.DB_OPERATION) from e

        logger.debug("Created document", extra={"collection": collection, "id": document_id})
        return dict(record["d"])

    @with_session()
    async def update(
        self,
        session: AsyncSession,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
    ) -> dict[str, Any]:
        """Set only the given fields on an existing document.

        Raises:
            StoreError: If the document does not exist or the write fails
        """
        try:
            query, params = DocumentQueries.update(collection, fields)
            result = await session.run(query, parameters={"id": document_id, **params})
            record = await result.single(strict=False)
        except ValueError as e:
            raise _store_error(e, "update", collection, document_id, ErrorCode.DB_OPERATION) from e
        except (Neo4jError, DriverError) as e:
            raise _store_error(e, "update", collection, document_id, ErrorCode.DB_OPERATION) from e

        if record is None:
            raise StoreError(
                f"No {collection} document with id {document_id}",
                details=DatabaseErrorDetails(
                    source="Neo4jDocumentStore",
                    operation="update",
                    service_name="neo4j",
                    collection=collection,
                    document_id=document_id,
                ),
                code=ErrorCode.DB_RECORD_NOT_FOUND,
            )
        return dict(record["d"])
