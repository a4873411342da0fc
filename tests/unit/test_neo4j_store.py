"""
Unit tests for the Neo4j document store adapter against a fake driver.
"""
import pytest
from neo4j.exceptions import ServiceUnavailable

from chat_companion.core.base import ErrorCode
from chat_companion.core.errors import StoreError
from chat_companion.domain.models.context import ContextEntry
from chat_companion.domain.models.message import Message
from chat_companion.infrastructure.neo4j.document_store import Neo4jDocumentStore

pytestmark = pytest.mark.asyncio


class FakeResult:
    def __init__(self, records):
        self.records = records

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for record in self.records:
            yield record

    async def single(self, strict=False):
        if not self.records:
            if strict:
                raise AssertionError("expected a record")
            return None
        return self.records[0]


class FakeSession:
    def __init__(self, driver):
        self.driver = driver

    async def __aenter__(self):
        self.driver.sessions_opened += 1
        return self

    async def __aexit__(self, *exc):
        self.driver.sessions_closed += 1

    async def run(self, query, parameters=None):
        self.driver.queries.append((query, parameters))
        if self.driver.error:
            raise self.driver.error
        return FakeResult(self.driver.records)


class FakeDriver:
    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.queries = []
        self.sessions_opened = 0
        self.sessions_closed = 0

    def session(self):
        return FakeSession(self)


async def test_find_compiles_filters_and_closes_session():
    driver = FakeDriver(records=[{"d": {"id": "e1", "summary": "s"}}])
    store = Neo4jDocumentStore(driver)

    docs = await store.find(
        "chat_context", {"chat_id": "c1", "author_id__ne": "bob"}, order_by="created_at", descending=True
    )

    assert docs == [{"id": "e1", "summary": "s"}]
    query, params = driver.queries[0]
    assert query.startswith("MATCH (d:ChatContext) WHERE d.chat_id = $p_0")
    assert query.endswith("ORDER BY d.created_at DESC")
    assert params == {"p_0": "c1", "p_1": "bob"}
    assert driver.sessions_opened == driver.sessions_closed == 1


async def test_create_passes_properties_without_id_or_timestamp():
    driver = FakeDriver(records=[{"d": {"id": "x", "chat_id": "c1", "created_at": 1714564800.0}}])
    store = Neo4jDocumentStore(driver)

    await store.create("chat_context", {"chat_id": "c1", "created_at": 5, "reminder": None})

    query, params = driver.queries[0]
    assert "timestamp() / 1000.0" in query
    assert params["properties"] == {"chat_id": "c1"}
    assert params["id"]


async def test_update_missing_document_raises_not_found():
    store = Neo4jDocumentStore(FakeDriver(records=[]))
    with pytest.raises(StoreError) as exc_info:
        await store.update("messages", "m1", {"reminder": "r"})
    assert exc_info.value.code == ErrorCode.DB_RECORD_NOT_FOUND


async def test_get_returns_none_when_missing():
    assert await Neo4jDocumentStore(FakeDriver()).get("chats", "c1") is None


async def test_driver_errors_become_store_errors():
    store = Neo4jDocumentStore(FakeDriver(error=ServiceUnavailable("gone")))
    with pytest.raises(StoreError) as exc_info:
        await store.find("messages", {"chat_id": "c1"})
    assert exc_info.value.code == ErrorCode.DB_QUERY


async def test_invalid_field_names_become_store_errors():
    driver = FakeDriver()
    with pytest.raises(StoreError):
        await Neo4jDocumentStore(driver).find("messages", {"text) DELETE d //": 1})
    assert driver.queries == []


def test_invalid_record_raises_validation_error():
    with pytest.raises(StoreError) as exc_info:
        ContextEntry.from_document({"id": "e1", "chat_id": "c1"})
    assert exc_info.value.code == ErrorCode.DB_VALIDATION


@pytest.mark.parametrize(
    ("model", "record"),
    [
        (ContextEntry, {"id": "e1", "chat_id": "c1", "author_id": "a", "summary": "s", "source_message_id": "m1"}),
        (Message, {"id": "m1", "chat_id": "c1", "author_id": "a", "text": "hi"}),
    ],
)
def test_record_without_timestamp_is_rejected(model, record):
    with pytest.raises(StoreError) as exc_info:
        model.from_document(record)
    assert exc_info.value.code == ErrorCode.DB_VALIDATION


def test_epoch_timestamps_round_trip_as_utc():
    entry = ContextEntry.from_document(
        {
            "id": "e1",
            "chat_id": "c1",
            "author_id": "a",
            "summary": "s",
            "created_at": 1714564800.0,
            "source_message_id": "m1",
        }
    )
    assert entry.created_at.isoformat() == "2024-05-01T12:00:00+00:00"
    assert entry.to_document()["created_at"] == 1714564800.0
