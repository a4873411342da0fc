"""
Unit tests for Cypher filter compilation and query construction.
"""
import pytest

from chat_companion.infrastructure.neo4j.filter_compiler import compile_filters, split_filter_key
from chat_companion.infrastructure.neo4j.queries import DocumentQueries


def test_empty_filters():
    assert compile_filters(None) == ("", {})
    assert compile_filters({}) == ("", {})


def test_equality_and_range():
    where, params = compile_filters({"chat_id": "c1", "created_at__gte": 10.0})
    assert where == "WHERE d.chat_id = $p_0 AND d.created_at >= $p_1"
    assert params == {"p_0": "c1", "p_1": 10.0}


def test_not_equal_keeps_missing_properties():
    where, params = compile_filters({"acknowledged__ne": True})
    assert where == "WHERE (d.acknowledged IS NULL OR d.acknowledged <> $p_0)"
    assert params == {"p_0": True}


def test_null_checks():
    where, params = compile_filters({"reminder": None, "refined_message__ne": None})
    assert where == "WHERE d.reminder IS NULL AND d.refined_message IS NOT NULL"
    assert params == {}


@pytest.mark.parametrize("key", ["bad field", "x) DETACH DELETE d //", "1abc"])
def test_invalid_property_names_rejected(key):
    with pytest.raises(ValueError):
        compile_filters({key: 1})


def test_unknown_operator_rejected():
    with pytest.raises(ValueError):
        split_filter_key("created_at__near")


def test_find_query_orders_and_limits():
    query, params = DocumentQueries.find(
        "chat_context", {"chat_id": "c1"}, order_by="created_at", descending=True, limit=5
    )
    assert query == (
        "MATCH (d:ChatContext) WHERE d.chat_id = $p_0 RETURN d ORDER BY d.created_at DESC LIMIT $limit"
    )
    assert params == {"p_0": "c1", "limit": 5}


def test_create_uses_database_clock():
    query, _ = DocumentQueries.create("messages")
    assert "CREATE (d:Message)" in query
    assert "d.created_at = timestamp() / 1000.0" in query


def test_update_is_partial():
    query, params = DocumentQueries.update("messages", {"reminder": "hi"})
    assert "SET d += $fields" in query
    assert params == {"fields": {"reminder": "hi"}}


def test_unknown_collection_rejected():
    with pytest.raises(ValueError):
        DocumentQueries.get_by_id("users")
