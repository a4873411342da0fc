"""Safe filter compilation for Cypher queries.

Builds parameterised WHERE clauses from ``field__op`` filter dictionaries,
the same syntax every DocumentStore implementation accepts.
"""

import re
from typing import Any

_OPS = {
    "lt": "<",
    "lte": "<=",
    "gt": ">",
    "gte": ">=",
    "ne": "<>",
    "in": "IN",
    "contains": "CONTAINS",
    "startswith": "STARTS WITH",
}

FILTER_OPERATORS = frozenset(_OPS)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: str) -> str:
    """Reject anything that cannot be spliced into Cypher as a property name."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid property name: {name!r}")
    return name


def split_filter_key(key: str) -> tuple[str, str | None]:
    """Split ``"created_at__gte"`` into ``("created_at", "gte")``."""
    if "__" not in key:
        return check_identifier(key), None
    field, op = key.split("__", 1)
    if op not in _OPS:
        raise ValueError(f"Unsupported filter operator: {op!r}")
    return check_identifier(field), op


def compile_filters(
    filters: dict[str, Any] | None,
    alias: str = "d",
) -> tuple[str, dict[str, Any]]:
    """Compile filter dictionary into safe WHERE clause and parameters.

    Args:
        filters: Dictionary of filters supporting:
            - Simple equality: {"field": "value"}
            - Operators: {"field__gte": 5, "field__ne": "text"}
            - Null checks: {"field": None}
        alias: Node alias to use in queries

    Returns:
        Tuple of (WHERE clause string, parameters dict)

    Examples:
        >>> compile_filters({"chat_id": "c1", "created_at__gte": 10.0})
        ("WHERE d.chat_id = $p_0 AND d.created_at >= $p_1", {"p_0": "c1", "p_1": 10.0})
    """
    if not filters:
        return "", {}

    clauses: list[str] = []
    params: dict[str, Any] = {}

    for idx, (key, value) in enumerate(filters.items()):
        field, op = split_filter_key(key)
        param = f"p_{idx}"

        if op is None and value is None:
            clauses.append(f"{alias}.{field} IS NULL")
            continue
        if op == "ne" and value is None:
            clauses.append(f"{alias}.{field} IS NOT NULL")
            continue

        if op == "ne":
            # Cypher's <> is null for missing properties, so those rows would be dropped
            clauses.append(f"({alias}.{field} IS NULL OR {alias}.{field} <> ${param})")
        elif op is None:
            clauses.append(f"{alias}.{field} = ${param}")
        else:
            clauses.append(f"{alias}.{field} {_OPS[op]} ${param}")
        params[param] = value

    return "WHERE " + " AND ".join(clauses), params
