"""Tests for attribute value kinds."""

import pytest

from querykv.errors import AttributeValueError
from querykv.query.values import ValueKind, copy_attributes, kind_of, validate_attributes


@pytest.mark.parametrize(
    "value, kind",
    [
        ("open", ValueKind.TEXT),
        (3, ValueKind.NUMBER),
        (2.5, ValueKind.NUMBER),
        (True, ValueKind.BOOLEAN),
        (None, ValueKind.NULL),
        ({"nested": {"deep": 1}}, ValueKind.MAPPING),
    ],
)
def test_kind_of(value, kind):
    assert kind_of(value) is kind


@pytest.mark.parametrize("value", [[1, 2], (1,), b"raw", object(), float("nan"), float("inf")])
def test_kind_of_rejects_unsupported(value):
    with pytest.raises(AttributeValueError):
        kind_of(value)


def test_validate_attributes_checks_names_and_nesting():
    validate_attributes({"status": "open", "meta": {"tags": {"a": True}}})

    with pytest.raises(AttributeValueError):
        validate_attributes({"": 1})
    with pytest.raises(AttributeValueError):
        validate_attributes({1: "x"})
    with pytest.raises(AttributeValueError):
        validate_attributes({"meta": {"bad": [1]}})
    with pytest.raises(AttributeValueError):
        validate_attributes(["status"])


def test_copy_attributes_is_deep():
    original = {"meta": {"a": 1}}
    copied = copy_attributes(original)

    copied["meta"]["a"] = 2
    assert original["meta"]["a"] == 1
