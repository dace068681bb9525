"""
SQLite storage for the run ledger.

The database file defaults to emoji_import.db in the working directory;
SLACK_EMOJI_IMPORT_DB overrides it, and ":memory:" keeps everything in process.
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

DB_ENV = "SLACK_EMOJI_IMPORT_DB"
DEFAULT_DB_FILE = "emoji_import.db"
MEMORY = ":memory:"


def db_url(path: Optional[str] = None) -> str:
    path = path or os.environ.get(DB_ENV) or os.path.join(os.getcwd(), DEFAULT_DB_FILE)
    if path == MEMORY:
        return "sqlite://"
    return f"sqlite:///{os.path.abspath(os.path.expanduser(path))}"


def make_engine(path: Optional[str] = None) -> Engine:
    url = db_url(path)
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if url == "sqlite://":
        # every new connection to :memory: is a new empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def make_session_factory(bind: Engine) -> Callable[[], Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = make_engine()
SessionLocal = make_session_factory(engine)
Base = declarative_base()


def init_db(bind: Any = None) -> None:
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def session_scope(factory: Optional[Callable[[], Session]] = None) -> Iterator[Session]:
    """Session that commits on success, rolls back on error and is always closed."""
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
