"""
Entry, collector and predicate helpers used by the query layer.

Entries are (key, value) pairs: a record key with its attribute mapping,
or an attribute name with its value. Constant predicates are module-level
singletons so callers (and the query layer) can compare them by identity.
"""

from collections import OrderedDict
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    Iterator,
    Mapping,
    MutableMapping,
    NamedTuple,
    Optional,
    TypeVar,
)

from querykv.errors import DuplicateKeyError, PreconditionError

K = TypeVar("K")
V = TypeVar("V")
K2 = TypeVar("K2")
V2 = TypeVar("V2")
C = TypeVar("C")
M = TypeVar("M", bound=MutableMapping)

Predicate = Callable[[Any], bool]


class Entry(NamedTuple, Generic[K, V]):
    key: K
    value: V


def entry(key: K, value: V) -> Entry[K, V]:
    """Create an entry."""
    return Entry(key, value)


def within_supplier(collection: C) -> Callable[[], C]:
    """Wrap a collection in a zero-argument supplier."""
    return lambda: collection


def to_supplied_collection(collection: C) -> Callable[[Iterable[Any]], C]:
    """
    Build a collector that adds every item to the given collection.

    Lists are appended to, sets are added to. The same collection object is
    returned so results can accumulate across calls.

    Args:
        collection: A list or set (anything with append() or add())

    Returns:
        Function taking an iterable and returning the filled collection
    """
    supplier = within_supplier(collection)

    def collect(items: Iterable[Any]) -> C:
        target = supplier()
        add = getattr(target, "append", None) or getattr(target, "add", None)
        if add is None:
            raise PreconditionError(
                f"Cannot collect into {type(target).__name__}: no append() or add()"
            )
        for item in items:
            add(item)
        return target

    return collect


def key_stream(source: Any) -> Iterator[Any]:
    """
    Stream of keys from a mapping or from an iterable of entries.
    """
    if isinstance(source, Mapping):
        return iter(source.keys())
    return (item[0] for item in source)


def entry_stream(mapping: Mapping[K, V]) -> Iterator[Entry[K, V]]:
    """Stream of entries in a mapping, in the mapping's iteration order."""
    return (Entry(key, value) for key, value in mapping.items())


def entries_to_map(
    entries: Iterable[Any],
    map_factory: Callable[[], M] = dict,  # type: ignore[assignment]
) -> M:
    """
    Collect entries into a mapping.

    Args:
        entries: Iterable of (key, value) pairs
        map_factory: Zero-argument callable returning an empty mapping

    Returns:
        The filled mapping

    Raises:
        DuplicateKeyError: If a key occurs more than once
    """
    result = map_factory()
    for key, value in entries:
        if key in result:
            raise DuplicateKeyError(f"Duplicate key {key}", details={"key": key})
        result[key] = value
    return result


def entries_to_ordered_map(entries: Iterable[Any]) -> "OrderedDict[Any, Any]":
    """Collect entries into an OrderedDict, rejecting duplicate keys."""
    return entries_to_map(entries, OrderedDict)


def entry_mapper(
    key_transform: Callable[[K], K2],
    value_transform: Callable[[V], V2],
) -> Callable[[Entry[K, V]], Entry[K2, V2]]:
    """Transform both key and value of an entry."""
    return lambda e: Entry(key_transform(e[0]), value_transform(e[1]))


def key_mapper(key_transform: Callable[[K], K2]) -> Callable[[Entry[K, V]], Entry[K2, V]]:
    """Transform only the key of an entry."""
    return lambda e: Entry(key_transform(e[0]), e[1])


def value_mapper(value_transform: Callable[[V], V2]) -> Callable[[Entry[K, V]], Entry[K, V2]]:
    """Transform only the value of an entry."""
    return lambda e: Entry(e[0], value_transform(e[1]))


def _eternally_true(obj: Any) -> bool:
    return True


def _eternally_false(obj: Any) -> bool:
    return False


def _is_null(obj: Any) -> bool:
    return obj is None


def _is_not_null(obj: Any) -> bool:
    return obj is not None


def ever_true() -> Predicate:
    return _eternally_true


def ever_false() -> Predicate:
    return _eternally_false


def is_null() -> Predicate:
    return _is_null


def is_not_null() -> Predicate:
    return _is_not_null


def is_entry_value_null() -> Predicate:
    """Predicate true for an entry (itself not None) whose value is None."""
    return lambda e: _is_not_null(e) and _is_null(e[1])


def attribute_equals(name: str, value: Any) -> Predicate:
    """
    Attribute-entry predicate matching a single name/value pair.

    Args:
        name: Attribute name
        value: Expected value (compared with ==)
    """
    if name is None:
        raise PreconditionError("attribute name is missing")
    return lambda e: e is not None and e[0] == name and e[1] == value


def require_callable(predicate: Optional[Predicate], label: str = "predicate") -> Predicate:
    """
    Reject a missing or non-callable predicate.

    Raises:
        PreconditionError: If predicate is None or not callable
    """
    if predicate is None:
        raise PreconditionError(f"{label} is missing (use ever_true() to match everything)")
    if not callable(predicate):
        raise PreconditionError(
            f"{label} must be callable, got {type(predicate).__name__}",
            details={"type": type(predicate).__name__},
        )
    return predicate
