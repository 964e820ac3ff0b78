"""querykv: query, project and materialize schema-less key/attribute records."""

from querykv.errors import (
    AttributeValueError,
    DuplicateKeyError,
    MaterializationError,
    PreconditionError,
    QueryKVError,
)
from querykv.query import (
    ALL_KEYS,
    Entry,
    QueryInterface,
    Record,
    all_keys,
    any_entry_ok,
    ever_true,
)
from querykv.store.memory import InMemoryRepository

__version__ = "0.1.0"

__all__ = [
    "ALL_KEYS",
    "AttributeValueError",
    "DuplicateKeyError",
    "Entry",
    "InMemoryRepository",
    "MaterializationError",
    "PreconditionError",
    "QueryInterface",
    "QueryKVError",
    "Record",
    "all_keys",
    "any_entry_ok",
    "ever_true",
]
