from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings
from skills_wallet.db.models.base import Base

settings = get_settings()


def _engine_kwargs(url: str) -> dict[str, Any]:
    """Connection options per backend."""
    kwargs: dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


def build_engine(url: str, **overrides: Any) -> Engine:
    """Create an engine, enabling foreign keys on SQLite."""
    kwargs = _engine_kwargs(url)
    kwargs.update(overrides)
    new_engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(new_engine, "connect", _configure_sqlite_connection)
        event.listen(new_engine, "begin", _begin_sqlite_transaction)
    return new_engine


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # Hand transaction control to SQLAlchemy so SAVEPOINT works with pysqlite
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(conn) -> None:
    conn.exec_driver_sql("BEGIN")


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind: Engine | None = None) -> None:
    """Initialize database tables."""
    # Register every model on Base.metadata
    import skills_wallet.db.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables initialized")


def check_database() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    from sqlalchemy.exc import SQLAlchemyError

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency: one transaction per request, committed on success."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

