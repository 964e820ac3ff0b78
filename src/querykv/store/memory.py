"""In-memory repository backing QueryInterface with a plain dict."""

from typing import Any, Callable, Dict, Hashable, Iterable, Mapping, Optional, Tuple

from querykv.errors import PreconditionError
from querykv.query.interface import (
    QueryInterface,
    ResultMapper,
    ResultObjectMaker,
    is_all_keys,
    normalize_attribute_selector,
    normalize_key_selector,
)
from querykv.query.predicates import Entry, entries_to_map
from querykv.query.records import record_from_entry, record_key
from querykv.query.values import AttributeMapping, copy_attributes, validate_attributes
from querykv.utils.logging import get_logger

logger = get_logger(__name__)


class InMemoryRepository(QueryInterface):
    """
    Records held in insertion order in a dict.

    Fetch results are deep copies, so callers never see (or mutate) the
    stored mappings. Not synchronized; share across threads only with
    external locking.
    """

    def __init__(
        self,
        object_maker: ResultObjectMaker = record_from_entry,
        object_to_key: Callable[[Any], Hashable] = record_key,
        projection: Iterable[str] = (),
        records: Optional[Mapping[Hashable, Mapping[str, Any]]] = None,
    ):
        self._object_maker = object_maker
        self._object_to_key = object_to_key
        self._projection = normalize_attribute_selector(projection)
        self._records: Dict[Hashable, AttributeMapping] = {}
        for key, attributes in (records or {}).items():
            self.put(key, attributes)

    def __len__(self) -> int:
        return len(self._records)

    def object_maker(self) -> ResultObjectMaker:
        return self._object_maker

    def object_to_key(self) -> Callable[[Any], Hashable]:
        return self._object_to_key

    def projection_attributes(self) -> Tuple[str, ...]:
        return self._projection

    def put(self, key: Hashable, attributes: Mapping[str, Any]) -> None:
        """
        Insert or replace a record.

        Raises:
            PreconditionError: If key is None
            AttributeValueError: If attributes hold an unsupported value
        """
        if key is None:
            raise PreconditionError("record key is missing")
        validate_attributes(attributes)
        self._records[key] = copy_attributes(attributes)
        logger.debug(f"Stored record {key!r} ({len(attributes)} attributes)")

    def delete(self, key: Hashable) -> bool:
        """Remove a record. Returns False if the key was not present."""
        if key is None:
            raise PreconditionError("record key is missing")
        removed = self._records.pop(key, None) is not None
        if removed:
            logger.debug(f"Deleted record {key!r}")
        return removed

    def exists(self, key: Hashable) -> bool:
        if key is None:
            raise PreconditionError("object reference key is missing")
        return key in self._records

    def query_for_details(
        self,
        keys: Iterable[Hashable],
        attributes: Iterable[str],
        result_mapper: ResultMapper,
    ) -> Any:
        selected_keys = normalize_key_selector(keys)
        projection = normalize_attribute_selector(attributes)
        if result_mapper is None:
            raise PreconditionError("result mapper is missing")

        if is_all_keys(selected_keys):
            candidates = list(self._records)
        else:
            candidates = [key for key in selected_keys if key in self._records]

        found = entries_to_map(
            Entry(key, self._project(self._records[key], projection)) for key in candidates
        )
        logger.debug(f"Fetched {len(found)} of {len(self._records)} records")
        return result_mapper(found)

    @staticmethod
    def _project(attributes: AttributeMapping, projection: Tuple[str, ...]) -> AttributeMapping:
        if not projection:
            return copy_attributes(attributes)
        return copy_attributes({name: attributes[name] for name in projection if name in attributes})
