"""Pytest configuration and fixtures."""

import pytest
from pydantic import BaseModel
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from querykv.database.record_repo import SqlRecordRepository
from querykv.database.schema import Base
from querykv.query.records import require_attribute
from querykv.store.memory import InMemoryRepository


class Ticket(BaseModel):
    """Domain object used to exercise materialization."""
    key: str
    status: str


def ticket_from_entry(entry) -> Ticket:
    key, attributes = entry
    return Ticket(key=key, status=require_attribute(attributes, "status"))


def ticket_key(ticket: Ticket) -> str:
    return ticket.key


SCENARIO_RECORDS = {
    "A": {"status": "open", "owner": "ana"},
    "B": {"status": "closed", "owner": "bo"},
}


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ticket_repo():
    """In-memory repository holding the open/closed scenario as Tickets."""
    return InMemoryRepository(
        object_maker=ticket_from_entry,
        object_to_key=ticket_key,
        projection=("status",),
        records=SCENARIO_RECORDS,
    )


@pytest.fixture
def sql_repo(tmp_path):
    """SQLite file repository seeded with the scenario records."""
    repo = SqlRecordRepository(str(tmp_path / "records.db"))
    for key, attributes in SCENARIO_RECORDS.items():
        repo.put(key, attributes)
    return repo
