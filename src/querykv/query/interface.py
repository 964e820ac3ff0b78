"""
Query facade over a keyed collection of schema-less records.

A repository supplies one primitive, query_for_details(), which resolves a
key selector and an attribute selector into a {key: attributes} mapping and
hands it to a result mapper. Every other query here is built on top of it:

    query_for_details -> entry stream -> any-match entry filter
        -> object_maker -> object predicate -> list / key / first match

Nothing is cached between calls. Streams are single-pass generators that
are consumed on demand.
"""

from abc import ABC, abstractmethod
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Sized,
    Tuple,
    TypeVar,
)

from querykv.errors import PreconditionError
from querykv.query.predicates import Entry, Predicate, entry_stream, ever_true, require_callable
from querykv.query.values import AttributeMapping
from querykv.utils.logging import get_logger

logger = get_logger(__name__)

K = TypeVar("K")
R = TypeVar("R")
T = TypeVar("T")

ResultMapper = Callable[[Dict[K, AttributeMapping]], T]
ResultObjectMaker = Callable[[Entry[K, AttributeMapping]], R]

# An empty key selector always means "every key", never "no keys".
ALL_KEYS: Tuple[Any, ...] = ()

# Attribute-entry predicate accepting every record, even one whose projected
# attribute mapping is empty.
any_entry_ok: Predicate = ever_true()


def all_keys() -> Tuple[Any, ...]:
    """Key selector meaning all keys in the repository."""
    return ALL_KEYS


def is_all_keys(keys: Any) -> bool:
    """
    True when the key selector is the all-keys sentinel.

    Only sized selectors (tuples, lists, sets) can be checked; pass a
    generator through normalize_key_selector() first.

    Raises:
        PreconditionError: If keys is None or has no length
    """
    if keys is ALL_KEYS:
        return True
    if keys is None:
        raise PreconditionError("key selector is missing (use all_keys() to select everything)")
    if not isinstance(keys, Sized):
        raise PreconditionError(
            f"cannot check an unsized key selector ({type(keys).__name__}); "
            "normalize it with normalize_key_selector() first"
        )
    return len(keys) == 0


def normalize_key_selector(keys: Any) -> Tuple[Any, ...]:
    """
    Materialize a key selector into a tuple.

    Raises:
        PreconditionError: If keys is None or a bare str/bytes
    """
    if keys is None:
        raise PreconditionError("key selector is missing (use all_keys() to select everything)")
    if isinstance(keys, (str, bytes)):
        raise PreconditionError(
            f"key selector must be a sequence of keys, not {type(keys).__name__}",
            details={"keys": keys},
        )
    if keys is ALL_KEYS:
        return ALL_KEYS
    try:
        selected = tuple(keys)
    except TypeError as exc:
        raise PreconditionError(f"key selector is not iterable: {type(keys).__name__}") from exc
    return selected or ALL_KEYS


def normalize_attribute_selector(attributes: Any) -> Tuple[str, ...]:
    """
    Materialize an attribute selector into a tuple of names.

    An empty result means all attributes.

    Raises:
        PreconditionError: If attributes is None, a bare string, or holds
            anything other than non-empty strings
    """
    if attributes is None:
        raise PreconditionError("attribute selector is missing")
    if isinstance(attributes, (str, bytes)):
        raise PreconditionError(
            f"attribute selector must be a sequence of names, not {type(attributes).__name__}",
            details={"attributes": attributes},
        )
    selected = tuple(attributes)
    for name in selected:
        if not isinstance(name, str) or not name:
            raise PreconditionError(
                f"attribute names must be non-empty strings, got {name!r}",
                details={"name": repr(name)},
            )
    return selected


def single_field_matcher(predicate: Predicate) -> Callable[[Entry[Any, AttributeMapping]], bool]:
    """
    Lift an attribute-entry predicate to a record-entry predicate.

    A record matches when at least one of its (name, value) entries
    satisfies the predicate. The record's attributes are not filtered.
    """
    predicate = require_callable(predicate)
    if predicate is any_entry_ok:
        return lambda e: e[1] is not None
    return lambda e: e[1] is not None and any(predicate(field) for field in entry_stream(e[1]))


def field_predicate(predicate: Predicate) -> Predicate:
    """Attribute-entry predicate that short-circuits for any_entry_ok."""
    predicate = require_callable(predicate)
    return lambda e: (e is not None and predicate is any_entry_ok) or predicate(e)


class QueryInterface(ABC, Generic[K, R]):
    """
    Base for queries over records keyed by K and materialized as R.

    Subclasses implement query_for_details(), object_maker() and
    object_to_key(); the remaining queries are derived. object_to_key()
    must invert object_maker(): for any entry (k, attrs),
    object_to_key()(object_maker()(Entry(k, attrs))) == k.
    """

    @abstractmethod
    def query_for_details(
        self,
        keys: Iterable[K],
        attributes: Iterable[str],
        result_mapper: ResultMapper,
    ) -> Any:
        """
        Fetch records and map them to a result.

        Args:
            keys: Keys to fetch, or all_keys()
            attributes: Attribute names to project (empty means all)
            result_mapper: Function applied to the {key: attributes} mapping

        Returns:
            Whatever result_mapper returns

        Unknown keys are omitted. An existing key whose projected attributes
        are all absent is included with an empty mapping.
        """

    @abstractmethod
    def object_maker(self) -> ResultObjectMaker:
        """Function building an R from an Entry(key, attributes)."""

    @abstractmethod
    def object_to_key(self) -> Callable[[R], K]:
        """Function recovering the key from an R."""

    def projection_attributes(self) -> Tuple[str, ...]:
        """Default attribute selector used when materializing objects."""
        return ()

    def exists(self, key: K) -> bool:
        """
        Check if a record with this key exists.

        Raises:
            PreconditionError: If key is None
        """
        if key is None:
            raise PreconditionError("object reference key is missing")
        return bool(self.query_for_details((key,), (), lambda found: key in found))

    def query_for_object(self, key: K) -> Optional[R]:
        """
        Fetch and materialize the object for one key.

        Returns:
            The object, or None if no record has this key

        Raises:
            PreconditionError: If key is None
        """
        if key is None:
            raise PreconditionError("object reference key is missing")
        return next(self.query_for_object_stream((key,), ever_true()), None)

    def query_for_objects(self, keys: Iterable[K], predicate: Predicate) -> List[R]:
        """List form of query_for_object_stream()."""
        return list(self.query_for_object_stream(keys, predicate))

    def query_for_object_stream(self, keys: Iterable[K], predicate: Predicate) -> Iterator[R]:
        """
        Stream objects for the given keys that satisfy an object predicate.

        Arguments are validated and the repository is queried when this is
        called; objects are built lazily as the stream is consumed.

        Args:
            keys: Keys to query, or all_keys()
            predicate: Filter applied to each materialized object

        Returns:
            Single-pass iterator of R in repository emission order
        """
        predicate = require_callable(predicate)
        entries = self.query_for_entry_stream(keys, any_entry_ok, self.projection_attributes())
        maker = self.object_maker()
        return (obj for obj in map(maker, entries) if predicate(obj))

    def query_for_entry_stream(
        self,
        keys: Iterable[K],
        predicate: Predicate,
        attributes: Iterable[str],
    ) -> Iterator[Entry[K, AttributeMapping]]:
        """
        Stream raw (key, attributes) entries.

        A record is kept when at least one of its attribute entries
        satisfies the predicate; kept records carry their full projected
        attribute mapping. Pass any_entry_ok to keep every record.

        Args:
            keys: Keys to query, or all_keys()
            predicate: Predicate over (name, value) attribute entries
            attributes: Attribute names to project (empty means all)

        Returns:
            Single-pass iterator of Entry(key, attributes)
        """
        selected_keys = normalize_key_selector(keys)
        matcher = single_field_matcher(predicate)
        selected_attributes = normalize_attribute_selector(attributes)

        key_count = "ALL" if is_all_keys(selected_keys) else len(selected_keys)
        logger.debug(f"Entry query: keys={key_count} attributes={list(selected_attributes) or 'ALL'}")
        entries = self.query_for_details(selected_keys, selected_attributes, entry_stream)
        return (e for e in entries if matcher(e))

    def query_for_key(self, predicate: Predicate) -> Optional[K]:
        """
        Key of the first object (across all keys) satisfying the predicate.

        Returns:
            The key, or None if nothing matches
        """
        found = next(self.query_for_object_stream(ALL_KEYS, predicate), None)
        if found is None:
            return None
        return self.object_to_key()(found)

    def query_for_keys(self, predicate: Predicate) -> List[K]:
        """Keys of all objects (across all keys) satisfying the predicate."""
        to_key = self.object_to_key()
        return [to_key(obj) for obj in self.query_for_object_stream(ALL_KEYS, predicate)]
