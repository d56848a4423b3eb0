from contextlib import contextmanager
from typing import Generator

from sqlalchemy import MetaData, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def get_engine(sqlite_path: str, metadata: MetaData | None = None) -> Engine:
    """Create an engine for ``sqlite_path`` (``:memory:`` allowed), creating tables from ``metadata``."""
    engine = create_engine(f"sqlite:///{sqlite_path}", future=True)
    if metadata is not None:
        metadata.create_all(engine)
    return engine


def get_session(sqlite_path: str, metadata: MetaData | None = None) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    engine = get_engine(sqlite_path, metadata)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


@contextmanager
def session_context(sqlite_path: str, metadata: MetaData | None = None) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Rolls back on error and always closes. Commits stay explicit.

    Usage:
        with session_context(sqlite_path, Base.metadata) as session:
            page = FilterOrSearch(presenter, params).execute(session.query(Cheese))
    """
    session = get_session(sqlite_path, metadata)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
