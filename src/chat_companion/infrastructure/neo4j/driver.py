"""Neo4j driver and connection management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from neo4j import AsyncDriver, AsyncGraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from chat_companion.core.base import DatabaseErrorDetails, ErrorCode
from chat_companion.core.config import Settings
from chat_companion.core.errors import StoreError
from chat_companion.core.logging import get_logger
from chat_companion.infrastructure.neo4j.queries import DocumentQueries

logger = get_logger(__name__)


@asynccontextmanager
async def open_neo4j_driver(
    settings: Settings,
    max_connection_pool_size: int = 50,
    max_connection_lifetime: int = 3600,
) -> AsyncIterator[AsyncDriver]:
    """Connect to Neo4j, verify the connection and close the driver on exit.

    Raises:
        StoreError: If the database cannot be reached
    """
    logger.info(
        "Creating Neo4j driver",
        extra={
            "uri": settings.neo4j_uri,
            "pool_size": max_connection_pool_size,
            "connection_lifetime": max_connection_lifetime,
        },
    )

    driver = AsyncGraphDatabase.driver(
        settings.neo4j_uri,
        auth=(settings.neo4j_user, settings.neo4j_password),
        max_connection_pool_size=max_connection_pool_size,
        max_connection_lifetime=max_connection_lifetime,
    )

    try:
        try:
            await driver.verify_connectivity()
        except (Neo4jError, DriverError, OSError) as e:
            raise StoreError(
                f"Could not connect to Neo4j: {e}",
                details=DatabaseErrorDetails(
                    source="open_neo4j_driver",
                    operation="verify_connectivity",
                    service_name="neo4j",
                    endpoint=settings.neo4j_uri,
                ),
                code=ErrorCode.DB_CONNECTION,
            ) from e
        logger.info("Neo4j connection established")

        yield driver
    finally:
        await driver.close()
        logger.info("Neo4j driver closed")


async def ensure_constraints(driver: AsyncDriver) -> None:
    """Create id uniqueness constraints if they are missing."""
    async with driver.session() as session:
        for statement in DocumentQueries.ensure_constraints():
            await session.run(statement)
