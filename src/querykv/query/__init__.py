"""Query facade, entry helpers and value kinds."""

from querykv.query.interface import (
    ALL_KEYS,
    QueryInterface,
    ResultMapper,
    ResultObjectMaker,
    all_keys,
    any_entry_ok,
    field_predicate,
    is_all_keys,
    normalize_attribute_selector,
    normalize_key_selector,
    single_field_matcher,
)
from querykv.query.predicates import Entry, entry, entry_stream, entries_to_map, ever_true
from querykv.query.records import Record, record_from_entry, record_key, require_attribute
from querykv.query.values import AttributeMapping, AttributeValue, ValueKind, kind_of, validate_attributes

__all__ = [
    "ALL_KEYS",
    "AttributeMapping",
    "AttributeValue",
    "Entry",
    "QueryInterface",
    "Record",
    "ResultMapper",
    "ResultObjectMaker",
    "ValueKind",
    "all_keys",
    "any_entry_ok",
    "entries_to_map",
    "entry",
    "entry_stream",
    "ever_true",
    "field_predicate",
    "is_all_keys",
    "kind_of",
    "normalize_attribute_selector",
    "normalize_key_selector",
    "record_from_entry",
    "record_key",
    "require_attribute",
    "single_field_matcher",
    "validate_attributes",
]
