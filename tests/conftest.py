"""
Shared fixtures: an in-memory document store, a scripted oracle and a fixed clock.
"""
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import pytest

from chat_companion.core.base import DatabaseErrorDetails, ErrorCode
from chat_companion.core.config import PipelineConfig
from chat_companion.core.errors import StoreError
from chat_companion.domain.models.oracle import OracleFailure, OracleSuccess
from chat_companion.infrastructure.neo4j.filter_compiler import split_filter_key
from chat_companion.services.pipeline import build_pipeline

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


def _matches(doc: dict[str, Any], key: str, expected: Any) -> bool:
    field, op = split_filter_key(key)
    value = doc.get(field)
    if op is None:
        return value is None if expected is None else value == expected
    if op == "ne":
        return value is not None if expected is None else value != expected
    if op == "in":
        return value in expected
    if value is None:
        return False
    if op == "contains":
        return expected in value
    if op == "startswith":
        return str(value).startswith(expected)
    return {
        "lt": value < expected,
        "lte": value <= expected,
        "gt": value > expected,
        "gte": value >= expected,
    }[op]


class InMemoryDocumentStore:
    """DocumentStore with the same filter semantics as the Neo4j adapter."""

    def __init__(self, clock: FixedClock):
        self.clock = clock
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.fail_on: set[str] = set()
        self.pending_failures: list[tuple[str, str | None]] = []
        self.calls: list[tuple[str, str]] = []

    def fail_once(self, operation: str, collection: str | None = None) -> None:
        """Fail the next ``operation`` (optionally only on ``collection``)."""
        self.pending_failures.append((operation, collection))

    def _should_fail(self, operation: str, collection: str) -> bool:
        if operation in self.fail_on:
            return True
        for pending in self.pending_failures:
            if pending[0] == operation and pending[1] in (None, collection):
                self.pending_failures.remove(pending)
                return True
        return False

    def _check(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        if self._should_fail(operation, collection):
            raise StoreError(
                f"{operation} failed",
                details=DatabaseErrorDetails(
                    source="InMemoryDocumentStore",
                    operation=operation,
                    service_name="memory",
                    collection=collection,
                ),
                code=ErrorCode.DB_OPERATION,
            )

    def insert(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Seed a document as-is, bypassing failure injection."""
        stored = dict(doc)
        stored.setdefault("id", str(uuid4()))
        self.collections.setdefault(collection, {})[stored["id"]] = stored
        return stored

    def all(self, collection: str) -> list[dict[str, Any]]:
        return list(self.collections.get(collection, {}).values())

    async def find(self, collection, filters=None, *, order_by=None, descending=False, limit=None):
        self._check("find", collection)
        docs = [
            dict(d)
            for d in self.all(collection)
            if all(_matches(d, k, v) for k, v in (filters or {}).items())
        ]
        if order_by:
            docs.sort(key=lambda d: d.get(order_by) or 0, reverse=descending)
        return docs[:limit] if limit is not None else docs

    async def get(self, collection, document_id):
        self._check("get", collection)
        doc = self.collections.get(collection, {}).get(document_id)
        return dict(doc) if doc else None

    async def create(self, collection, data, *, timestamp_field="created_at"):
        self._check("create", collection)
        doc = {k: v for k, v in data.items() if v is not None}
        doc["id"] = str(data.get("id") or uuid4())
        if timestamp_field:
            doc[timestamp_field] = self.clock().timestamp()
        return dict(self.insert(collection, doc))

    async def update(self, collection, document_id, fields):
        self._check("update", collection)
        doc = self.collections.get(collection, {}).get(document_id)
        if doc is None:
            raise StoreError(f"No {collection} document with id {document_id}", code=ErrorCode.DB_RECORD_NOT_FOUND)
        doc.update(fields)
        return dict(doc)


class FakeOracle:
    """Returns scripted results in order and records every prompt."""

    def __init__(self, *responses: str | OracleFailure):
        self.responses = list(responses)
        self.prompts: list[str] = []
        self.responder = None

    def queue(self, *responses: str | OracleFailure) -> None:
        self.responses.extend(responses)

    async def generate(self, prompt: str):
        self.prompts.append(prompt)
        if self.responder is not None:
            return OracleSuccess(text=self.responder(prompt))
        if not self.responses:
            return OracleSuccess(text="")
        response = self.responses.pop(0)
        if isinstance(response, OracleFailure):
            return response
        return OracleSuccess(text=response)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store(clock):
    return InMemoryDocumentStore(clock)


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def config():
    return PipelineConfig()


@pytest.fixture
def pipeline(store, oracle, config, clock):
    return build_pipeline(store, oracle, config, clock=clock)


@pytest.fixture
def seed_message(store, clock):
    """Insert a message into the store and return its document."""

    def _seed(chat_id: str, author_id: str, text: str, minutes_ago: float = 0, **extra: Any) -> dict[str, Any]:
        return store.insert(
            "messages",
            {
                "chat_id": chat_id,
                "author_id": author_id,
                "text": text,
                "created_at": (clock() - timedelta(minutes=minutes_ago)).timestamp(),
                **extra,
            },
        )

    return _seed
