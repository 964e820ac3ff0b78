"""Tests for entry, collector and constant predicate helpers."""

from collections import OrderedDict

import pytest

from querykv.errors import DuplicateKeyError, PreconditionError
from querykv.query.predicates import (
    Entry,
    attribute_equals,
    entries_to_map,
    entries_to_ordered_map,
    entry,
    entry_mapper,
    entry_stream,
    ever_false,
    ever_true,
    is_entry_value_null,
    is_not_null,
    is_null,
    key_mapper,
    key_stream,
    require_callable,
    to_supplied_collection,
    value_mapper,
)


def test_entry_unpacks_and_names_fields():
    e = entry("status", "open")

    key, value = e
    assert (key, value) == ("status", "open")
    assert e.key == "status"
    assert e.value == "open"


def test_entries_to_map_rejects_duplicates():
    with pytest.raises(DuplicateKeyError, match="Duplicate key a"):
        entries_to_map([("a", 1), ("b", 2), ("a", 3)])


def test_entries_to_ordered_map_keeps_order():
    result = entries_to_ordered_map([("b", 1), ("a", 2)])

    assert isinstance(result, OrderedDict)
    assert list(result) == ["b", "a"]


def test_entries_to_map_custom_factory():
    result = entries_to_map(entry_stream({"x": 1}), map_factory=OrderedDict)

    assert result == OrderedDict(x=1)


def test_supplied_collection_accumulates():
    target = []
    collect = to_supplied_collection(target)

    assert collect([1, 2]) is target
    collect([3])
    assert target == [1, 2, 3]

    seen = set()
    assert to_supplied_collection(seen)(["a", "a", "b"]) == {"a", "b"}


def test_key_stream_from_mapping_and_entries():
    assert list(key_stream({"a": 1, "b": 2})) == ["a", "b"]
    assert list(key_stream([Entry("x", 1), ("y", 2)])) == ["x", "y"]


def test_entry_transformers():
    e = Entry("a", 1)

    assert entry_mapper(str.upper, lambda v: v * 10)(e) == Entry("A", 10)
    assert key_mapper(str.upper)(e) == Entry("A", 1)
    assert value_mapper(lambda v: v + 1)(e) == Entry("a", 2)


def test_constant_predicates_are_singletons():
    assert ever_true() is ever_true()
    assert ever_true()(None) is True
    assert ever_false()("anything") is False
    assert is_null()(None) is True
    assert is_not_null()(0) is True


def test_is_entry_value_null():
    predicate = is_entry_value_null()

    assert predicate(Entry("a", None)) is True
    assert predicate(Entry("a", 0)) is False
    assert predicate(None) is False


def test_attribute_equals():
    predicate = attribute_equals("status", "open")

    assert predicate(Entry("status", "open")) is True
    assert predicate(Entry("status", "closed")) is False
    assert predicate(Entry("owner", "open")) is False


def test_require_callable():
    with pytest.raises(PreconditionError, match="ever_true"):
        require_callable(None)
    with pytest.raises(PreconditionError, match="callable"):
        require_callable(42)
