"""Repository for records and record_attributes table operations."""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from querykv.database.schema import AttributeRow, RecordRow
from querykv.database.sqlite_client import get_engine, get_session_factory, session_context
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
from querykv.query.values import AttributeMapping, copy_value, kind_of, validate_attributes
from querykv.utils.logging import get_logger

logger = get_logger(__name__)

# Stay well under SQLite's bound-parameter limit for IN (...) clauses
IN_CLAUSE_CHUNK = 500


def _require_key(key: Any) -> str:
    if key is None:
        raise PreconditionError("record key is missing")
    if not isinstance(key, str) or not key:
        raise PreconditionError(
            f"record keys must be non-empty strings, got {key!r}",
            details={"key": repr(key)},
        )
    return key


def _chunks(values: Sequence[str], size: int = IN_CLAUSE_CHUNK) -> Iterable[Sequence[str]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


def save_record(
    session: Session,
    key: str,
    attributes: Mapping[str, Any],
    updated_at_utc: Optional[str] = None,
) -> RecordRow:
    """
    Insert or replace a record and all of its attributes.

    The previous attribute set is discarded entirely; attributes not in the
    new mapping are gone afterwards. Does not commit.

    Args:
        session: SQLAlchemy session
        key: Record key
        attributes: Attribute name to value (text, number, boolean, null or
            nested mapping)
        updated_at_utc: Optional ISO 8601 timestamp. If None, uses current time.

    Returns:
        RecordRow (new or existing)
    """
    key = _require_key(key)
    validate_attributes(attributes)
    if updated_at_utc is None:
        updated_at_utc = datetime.now(timezone.utc).isoformat()

    row = session.query(RecordRow).filter(RecordRow.record_key == key).first()
    if row:
        row.updated_at_utc = updated_at_utc
        session.query(AttributeRow).filter(AttributeRow.record_key == key).delete(
            synchronize_session=False
        )
        logger.debug(f"Replacing record: {key}")
    else:
        row = RecordRow(record_key=key, created_at_utc=updated_at_utc, updated_at_utc=updated_at_utc)
        session.add(row)
        logger.debug(f"Created new record: {key}")

    for name, value in attributes.items():
        session.add(
            AttributeRow(
                record_key=key,
                name=name,
                kind=kind_of(value).value,
                value_json=json.dumps(copy_value(value)),
            )
        )
    session.flush()
    return row


def delete_record(session: Session, key: str) -> bool:
    """
    Delete a record and its attributes. Does not commit.

    Returns:
        False if no record had this key
    """
    key = _require_key(key)
    session.query(AttributeRow).filter(AttributeRow.record_key == key).delete(
        synchronize_session=False
    )
    deleted = session.query(RecordRow).filter(RecordRow.record_key == key).delete(
        synchronize_session=False
    )
    if not deleted:
        logger.debug(f"Record not found for delete: {key}")
    return bool(deleted)


def record_exists(session: Session, key: str) -> bool:
    """Check if a record exists."""
    key = _require_key(key)
    return session.query(RecordRow.record_key).filter(RecordRow.record_key == key).first() is not None


def get_record_keys(session: Session, limit: Optional[int] = None) -> List[str]:
    """Get all record keys in ascending key order."""
    query = session.query(RecordRow.record_key).order_by(RecordRow.record_key.asc())
    if limit:
        query = query.limit(limit)
    return [row.record_key for row in query.all()]


def load_attributes(
    session: Session,
    keys: Sequence[str],
    attributes: Sequence[str] = (),
) -> Dict[str, AttributeMapping]:
    """
    Load attribute mappings for records.

    Args:
        session: SQLAlchemy session
        keys: Record keys; empty means all records
        attributes: Attribute names to load; empty means all

    Returns:
        Ordered {key: attributes}. All-keys results are in key order,
        explicit keys in the given order. Unknown keys are left out; known
        keys without any of the requested attributes map to {}.

    Raises:
        DuplicateKeyError: If an existing key is requested twice
    """
    if is_all_keys(keys):
        present = get_record_keys(session)
    else:
        wanted = [_require_key(key) for key in keys]
        found = set()
        for chunk in _chunks(list(dict.fromkeys(wanted))):
            rows = session.query(RecordRow.record_key).filter(RecordRow.record_key.in_(chunk)).all()
            found.update(row.record_key for row in rows)
        present = [key for key in wanted if key in found]

    values: Dict[str, AttributeMapping] = {key: {} for key in present}
    for chunk in _chunks(list(values)):
        query = session.query(AttributeRow).filter(AttributeRow.record_key.in_(chunk))
        if attributes:
            query = query.filter(AttributeRow.name.in_(list(attributes)))
        for row in query.all():
            values[row.record_key][row.name] = json.loads(row.value_json)

    # Attribute order follows the projection when one is given
    if attributes:
        values = {
            key: {name: found_attrs[name] for name in attributes if name in found_attrs}
            for key, found_attrs in values.items()
        }

    return entries_to_map(Entry(key, values[key]) for key in present)


class SqlRecordRepository(QueryInterface):
    """
    QueryInterface over a SQLite database of string-keyed records.

    Each call opens and closes its own session; results are fully loaded
    before the session closes.
    """

    def __init__(
        self,
        sqlite_path: str,
        object_maker: ResultObjectMaker = record_from_entry,
        object_to_key: Callable[[Any], str] = record_key,
        projection: Iterable[str] = (),
    ):
        self.sqlite_path = sqlite_path
        self._session_factory = get_session_factory(get_engine(sqlite_path))
        self._object_maker = object_maker
        self._object_to_key = object_to_key
        self._projection = normalize_attribute_selector(projection)

    def object_maker(self) -> ResultObjectMaker:
        return self._object_maker

    def object_to_key(self) -> Callable[[Any], str]:
        return self._object_to_key

    def projection_attributes(self) -> Tuple[str, ...]:
        return self._projection

    def put(self, key: str, attributes: Mapping[str, Any]) -> None:
        """Insert or replace a record."""
        with session_context(self._session_factory) as session:
            save_record(session, key, attributes)
            session.commit()

    def delete(self, key: str) -> bool:
        """Delete a record. Returns False if the key was not present."""
        with session_context(self._session_factory) as session:
            deleted = delete_record(session, key)
            session.commit()
        return deleted

    def exists(self, key: str) -> bool:
        if key is None:
            raise PreconditionError("object reference key is missing")
        with session_context(self._session_factory) as session:
            return record_exists(session, key)

    def query_for_details(
        self,
        keys: Iterable[str],
        attributes: Iterable[str],
        result_mapper: ResultMapper,
    ) -> Any:
        selected_keys = normalize_key_selector(keys)
        projection = normalize_attribute_selector(attributes)
        if result_mapper is None:
            raise PreconditionError("result mapper is missing")

        with session_context(self._session_factory) as session:
            found = load_attributes(session, selected_keys, projection)
        logger.debug(f"Fetched {len(found)} records from {self.sqlite_path}")
        return result_mapper(found)
