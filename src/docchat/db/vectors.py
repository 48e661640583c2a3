"""Vector encoding and metadata filter compilation for the sqlite index.

Filters follow the Pinecone metadata filter shape::

    {"documentId": {"$in": ["doc_a", "doc_b"]}, "pageNumber": 1}

A bare value means ``$eq``. Supported operators: ``$eq``, ``$ne``, ``$in``,
``$nin`` on fields, and ``$and`` / ``$or`` over lists of filters. Multiple keys
in one mapping are ANDed.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlite_vec import serialize_float32

# Metadata fields stored in their own column rather than read from the JSON blob.
_COLUMN_FIELDS: dict[str, str] = {"documentId": "document_id"}


def encode_vector(values: Sequence[float]) -> bytes:
    """Pack *values* into the float32 blob format sqlite-vec functions accept."""
    return serialize_float32(list(values))


def compile_filter(flt: dict[str, Any] | None) -> tuple[str, list[Any]]:
    """Translate a metadata filter into ``(sql_expression, params)``.

    Returns ``("", [])`` for an empty or missing filter.

    Raises:
        ValueError: On an unknown operator or malformed operand.
    """
    if not flt:
        return "", []
    return _compile_mapping(flt)


def _compile_mapping(flt: dict[str, Any]) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    for key, value in flt.items():
        if key in ("$and", "$or"):
            sql, p = _compile_logical(key, value)
        elif key.startswith("$"):
            raise ValueError(f"Unsupported filter operator at top level: {key!r}")
        else:
            sql, p = _compile_field(key, value)
        clauses.append(sql)
        params.extend(p)
    return " AND ".join(f"({c})" for c in clauses), params


def _compile_logical(op: str, operand: Any) -> tuple[str, list[Any]]:
    if not isinstance(operand, list) or not operand:
        raise ValueError(f"{op} expects a non-empty list of filters")
    parts: list[str] = []
    params: list[Any] = []
    for sub in operand:
        if not isinstance(sub, dict) or not sub:
            raise ValueError(f"{op} entries must be non-empty filter mappings")
        sql, p = _compile_mapping(sub)
        parts.append(f"({sql})")
        params.extend(p)
    joiner = " AND " if op == "$and" else " OR "
    return joiner.join(parts), params


def _compile_field(field: str, condition: Any) -> tuple[str, list[Any]]:
    if not isinstance(condition, dict):
        condition = {"$eq": condition}
    if not condition:
        raise ValueError(f"Empty condition for field {field!r}")

    clauses: list[str] = []
    params: list[Any] = []
    for op, operand in condition.items():
        expr, expr_params = _field_expr(field)
        if op == "$eq":
            sql, values = f"{expr} = ?", [operand]
        elif op == "$ne":
            sql, values = f"{expr} IS NOT ?", [operand]
        elif op in ("$in", "$nin"):
            if not isinstance(operand, (list, tuple, set, frozenset)):
                raise ValueError(f"{op} on {field!r} expects a list")
            values = list(operand)
            if not values:
                # Nothing is in an empty set.
                clauses.append("0" if op == "$in" else "1")
                continue
            placeholders = ",".join("?" * len(values))
            negate = "NOT " if op == "$nin" else ""
            sql = f"{expr} {negate}IN ({placeholders})"
        else:
            raise ValueError(f"Unsupported filter operator {op!r} on {field!r}")
        clauses.append(sql)
        params.extend(expr_params)
        params.extend(values)
    return " AND ".join(clauses), params


def _field_expr(field: str) -> tuple[str, list[Any]]:
    """Return the SQL expression that reads *field* and its bound parameters."""
    if field in _COLUMN_FIELDS:
        return _COLUMN_FIELDS[field], []
    if not field or '"' in field:
        raise ValueError(f"Invalid metadata field name: {field!r}")
    return "json_extract(metadata, ?)", [f'$."{field}"']
