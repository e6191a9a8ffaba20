from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from greasedesk.core.config import DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def _configure_sqlite_connection(dbapi_connection, _connection_record) -> None:
    # pysqlite's implicit BEGIN breaks SAVEPOINT; transactions are started in _sqlite_begin.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_begin(connection) -> None:
    connection.exec_driver_sql("BEGIN")


def build_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **kwargs)
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _sqlite_begin)
        return engine
    return create_engine(url, pool_pre_ping=True, **kwargs)


def init_database(url: str | None = None, *, engine: Engine | None = None) -> Engine:
    """Create the process-wide engine and session factory.

    Called once from the application lifespan; tests may pass their own engine.
    """
    global _engine, _session_factory
    if _engine is not None:
        return _engine

    _engine = engine or build_engine(url or DATABASE_URL)
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    logger.info("database initialised dialect=%s", _engine.dialect.name)
    return _engine


def dispose_database() -> None:
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
        logger.info("database disposed")
    _engine = None
    _session_factory = None


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database not initialised; call init_database() on startup")
    return _engine


def get_session_factory() -> sessionmaker:
    if _session_factory is None:
        raise RuntimeError("Database not initialised; call init_database() on startup")
    return _session_factory


def get_db() -> Iterator[Session]:
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
