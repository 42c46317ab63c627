import os
import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from quiz_arena.config import Settings

logger = logging.getLogger(__name__)


def _sqlite_file(url: str) -> Optional[str]:
    if not url.startswith("sqlite:///"):
        return None
    path = url[len("sqlite:///"):]
    if not path or path == ":memory:":
        return None
    return path


def create_db_engine(settings: Settings) -> Engine:
    url = settings.database_url
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, pool_pre_ping=True)

    db_file = _sqlite_file(url)
    if db_file:
        # Ensure data directory exists
        os.makedirs(os.path.dirname(os.path.abspath(db_file)), exist_ok=True)
        engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    else:
        # In-memory databases must share one connection across threads
        engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_db(engine: Engine):
    # registers the table models on SQLModel.metadata
    import quiz_arena.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables initialized")


def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session


@contextmanager
def transactional(session: Session):
    """
    Commit everything added inside the block, or nothing.

    Rolls back and re-raises on any failure.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
