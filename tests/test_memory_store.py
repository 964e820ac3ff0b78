"""Tests for the in-memory repository."""

import pytest

from querykv.errors import AttributeValueError, PreconditionError
from querykv.query.interface import all_keys
from querykv.query.predicates import ever_true
from querykv.query.records import Record
from querykv.store.memory import InMemoryRepository


def test_put_replaces_and_delete_removes():
    repo = InMemoryRepository()
    repo.put("k", {"a": 1, "b": 2})
    repo.put("k", {"a": 3})

    assert repo.query_for_object("k") == Record(key="k", attributes={"a": 3})
    assert len(repo) == 1
    assert repo.delete("k") is True
    assert repo.delete("k") is False
    assert repo.exists("k") is False


def test_put_validates_values():
    repo = InMemoryRepository()

    with pytest.raises(AttributeValueError):
        repo.put("k", {"a": [1, 2]})
    with pytest.raises(PreconditionError):
        repo.put(None, {"a": 1})
    assert len(repo) == 0


def test_fetch_returns_copies():
    repo = InMemoryRepository(records={"k": {"meta": {"n": 1}}})

    fetched = repo.query_for_details(["k"], [], lambda found: found)
    fetched["k"]["meta"]["n"] = 99

    assert repo.query_for_object("k").attributes == {"meta": {"n": 1}}


def test_default_projection_applies_to_objects():
    repo = InMemoryRepository(projection=["status"], records={"k": {"status": "open", "owner": "x"}})

    assert repo.query_for_object("k").attributes == {"status": "open"}


def test_result_mapper_receives_whole_collection():
    repo = InMemoryRepository(records={"a": {"n": 1}, "b": {"n": 2}, "c": {"n": 3}})

    total = repo.query_for_details(all_keys(), ["n"], lambda found: sum(v["n"] for v in found.values()))

    assert total == 6


def test_insertion_order_for_all_keys():
    repo = InMemoryRepository(records={"z": {}, "a": {}, "m": {}})

    assert repo.query_for_keys(ever_true()) == ["z", "a", "m"]


def test_null_values_are_kept():
    repo = InMemoryRepository(records={"k": {"owner": None}})

    record = repo.query_for_object("k")
    assert "owner" in record.attributes
    assert record.get("owner", "default") is None
    assert record.get("missing", "default") == "default"
