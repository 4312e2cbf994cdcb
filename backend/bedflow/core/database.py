"""
Database setup.
SQLModel engine and session helpers backing the durability sink.
"""
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine
from typing import Optional

from bedflow.config import settings


def build_engine(database_url: Optional[str] = None) -> Engine:
    """
    Creates an engine for the given URL (settings by default).

    SQLite connections are shared across threads because FastAPI may run
    handlers on its threadpool.
    """
    url = database_url or settings.DATABASE_URL
    connect_args = {}
    if "sqlite" in url:
        connect_args["check_same_thread"] = False

    return create_engine(
        url,
        echo=settings.DEBUG,
        connect_args=connect_args
    )


engine = build_engine()


def create_db_and_tables(target: Optional[Engine] = None) -> None:
    """
    Creates every table.
    Called on application startup.
    """
    # Table classes must be imported so they register in the metadata
    from bedflow.models import records  # noqa: F401

    SQLModel.metadata.create_all(target or engine)


def get_session_direct(target: Optional[Engine] = None) -> Session:
    """
    Returns a plain session (not a generator).

    IMPORTANT: the caller is responsible for closing it.

    Usage:
        session = get_session_direct()
        try:
            # operations
        finally:
            session.close()
    """
    return Session(target or engine)
