from contextlib import contextmanager
from typing import Callable, Generator, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .schema import Base

MEMORY_PATH = ":memory:"


def get_engine(sqlite_path: str) -> Engine:
    """
    Create an engine for a SQLite file and make sure the tables exist.

    ":memory:" gives a private in-memory database that survives across
    sessions of the returned engine.
    """
    if sqlite_path == MEMORY_PATH:
        engine = create_engine(
            "sqlite://",
            future=True,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(f"sqlite:///{sqlite_path}", future=True)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> Callable[[], Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_session(sqlite_path: str) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    return get_session_factory(get_engine(sqlite_path))()


@contextmanager
def session_context(source: Union[str, Callable[[], Session]]) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Rolls back on error and always closes the session. Commits are left to
    the caller.

    Usage:
        with session_context(sqlite_path) as session:
            save_record(session, "A", {"status": "open"})
            session.commit()

    Args:
        source: SQLite path, or a session factory from get_session_factory()
    """
    session = get_session(source) if isinstance(source, str) else source()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
