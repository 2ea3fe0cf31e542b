"""Database engine construction and session management.

No engine lives at module level: ``create_app()`` builds one from its
Settings and keeps the session factory on ``app.state``. Routes obtain a
session through the ``get_db`` dependency.
"""

import os

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Create base class for models
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create an engine with database-specific tuning."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False}
        )

        # WAL lets readers proceed while a writer holds the lock; foreign_keys
        # is OFF by default in SQLite and must be enabled per connection.
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(database_url, pool_pre_ping=True)


def ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return
    path = database_url[len(prefix):]
    if not path or path == ":memory:":
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to *engine*."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_schema(engine: Engine) -> None:
    """Create all tables and indexes that do not exist yet."""
    # Import models so they register with Base.metadata.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    """Dependency for FastAPI routes to get database session.

    Rolls back the transaction on unhandled exceptions so that the
    connection is returned to the pool in a clean state.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
