"""
Attribute value kinds.

Records are schema-less, but their values are restricted to a closed set of
kinds: text, number, boolean, null and nested mappings of the same. Stores
validate on write so that anything read back is one of these.
"""

import math
from enum import Enum
from typing import Any, Dict, Mapping, Union

from querykv.errors import AttributeValueError

AttributeValue = Union[str, int, float, bool, None, Mapping[str, "AttributeValue"]]
AttributeMapping = Dict[str, AttributeValue]


class ValueKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    MAPPING = "mapping"


def kind_of(value: Any) -> ValueKind:
    """
    Classify an attribute value.

    bool is checked before int since bool is an int subclass. Non-finite
    floats are rejected because they cannot be stored as JSON.

    Raises:
        AttributeValueError: If the value is not a supported kind
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise AttributeValueError(
                f"Non-finite number is not a valid attribute value: {value!r}",
                details={"value": repr(value)},
            )
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, Mapping):
        validate_attributes(value)
        return ValueKind.MAPPING
    raise AttributeValueError(
        f"Unsupported attribute value type: {type(value).__name__}",
        details={"type": type(value).__name__},
    )


def validate_attributes(attributes: Any) -> None:
    """
    Check that a record's attribute mapping only holds supported kinds.

    Args:
        attributes: Mapping of attribute name to value (nested mappings are
            checked recursively)

    Raises:
        AttributeValueError: On a non-mapping, a bad name or a bad value
    """
    if not isinstance(attributes, Mapping):
        raise AttributeValueError(
            f"Attributes must be a mapping, got {type(attributes).__name__}",
            details={"type": type(attributes).__name__},
        )
    for name, value in attributes.items():
        if not isinstance(name, str) or not name:
            raise AttributeValueError(
                f"Attribute names must be non-empty strings, got {name!r}",
                details={"name": repr(name)},
            )
        kind_of(value)


def copy_value(value: AttributeValue) -> AttributeValue:
    """Deep-copy a value; nested mappings become plain dicts."""
    if isinstance(value, Mapping):
        return {name: copy_value(inner) for name, inner in value.items()}
    return value


def copy_attributes(attributes: Mapping[str, AttributeValue]) -> AttributeMapping:
    return {name: copy_value(value) for name, value in attributes.items()}
