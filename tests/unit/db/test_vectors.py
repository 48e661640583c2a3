"""Tests for vector encoding and metadata filter compilation."""

from __future__ import annotations

import struct

import pytest

from docchat.db.vectors import compile_filter, encode_vector


def test_encode_vector_float32_blob():
    blob = encode_vector([1.0, 0.5])
    assert blob == struct.pack("2f", 1.0, 0.5)


# --- compile_filter ---


@pytest.mark.parametrize("flt", [None, {}])
def test_empty_filter(flt):
    assert compile_filter(flt) == ("", [])


def test_bare_value_is_eq_on_column():
    sql, params = compile_filter({"documentId": "doc_a"})
    assert sql == "(document_id = ?)"
    assert params == ["doc_a"]


def test_in_on_column():
    sql, params = compile_filter({"documentId": {"$in": ["doc_a", "doc_b"]}})
    assert sql == "(document_id IN (?,?))"
    assert params == ["doc_a", "doc_b"]


def test_nin_on_json_field():
    sql, params = compile_filter({"userId": {"$nin": ["u1"]}})
    assert sql == "(json_extract(metadata, ?) NOT IN (?))"
    assert params == ['$."userId"', "u1"]


def test_ne():
    sql, params = compile_filter({"pageNumber": {"$ne": 2}})
    assert sql == "(json_extract(metadata, ?) IS NOT ?)"
    assert params == ['$."pageNumber"', 2]


def test_empty_in_matches_nothing_and_empty_nin_everything():
    assert compile_filter({"documentId": {"$in": []}}) == ("(0)", [])
    assert compile_filter({"documentId": {"$nin": []}}) == ("(1)", [])


def test_multiple_keys_are_anded():
    sql, params = compile_filter({"documentId": "doc_a", "pageNumber": 1})
    assert sql == "(document_id = ?) AND (json_extract(metadata, ?) = ?)"
    assert params == ["doc_a", '$."pageNumber"', 1]


def test_or_of_filters():
    sql, params = compile_filter(
        {"$or": [{"documentId": "doc_a"}, {"documentId": "doc_b"}]}
    )
    assert sql == "(((document_id = ?)) OR ((document_id = ?)))"
    assert params == ["doc_a", "doc_b"]


@pytest.mark.parametrize(
    "flt",
    [
        {"documentId": {"$gt": 1}},
        {"$not": {"documentId": "a"}},
        {"documentId": {"$in": "doc_a"}},
        {"$and": []},
        {"$or": ["doc_a"]},
        {'bad"field': 1},
        {"documentId": {}},
    ],
)
def test_malformed_filters_raise(flt):
    with pytest.raises(ValueError):
        compile_filter(flt)
