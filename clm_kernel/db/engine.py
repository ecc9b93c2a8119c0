"""
Module: clm_kernel.db.engine
Responsibility: Owns the process-wide SQLAlchemy engine for the record
    store and hands out sessions bound to it.
Architecture position: Kernel > DB.  May import from db/base.py and, for
    table creation only, from models/.

Invariants enforced:
    - One engine per process; re-initializing disposes the previous one.
    - SQLite URLs share a single connection (StaticPool) so an in-memory
      store is visible to every session; other dialects get a pre-pinging
      QueuePool at READ COMMITTED.
    - Sessions keep loaded attributes after commit (expire_on_commit=False)
      so services can return DTOs built after the transaction ends.

Failure modes:
    - RuntimeError from get_engine/get_session before init_engine_from_url().
    - session_scope() rolls back and re-raises on any exception.
"""

import atexit
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from clm_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Record store not initialized. Call init_engine_from_url() first."


def _engine_options(database_url: str, pool: dict[str, Any]) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "poolclass": QueuePool,
        "isolation_level": "READ COMMITTED",
        **pool,
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the record store engine for ``database_url``.

    Pool arguments only apply to server databases (PostgreSQL through
    psycopg2); SQLite ignores them.

    Returns:
        The new Engine.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    pool = {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": pool_pre_ping,
        "pool_timeout": pool_timeout,
        "pool_recycle": pool_recycle,
    }
    _engine = create_engine(database_url, echo=echo, **_engine_options(database_url, pool))
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "record_store_engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    """The current engine.  Raises RuntimeError before initialization."""
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session() -> Session:
    """A new session on the current engine.  Raises RuntimeError before initialization."""
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    One transaction: commit on normal exit, roll back on any exception.

    Usage:
        with session_scope() as session:
            ContractService(session).create(record, ctx)
    """
    session = get_session()
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from clm_kernel.db.base import Base
    import clm_kernel.models  # noqa: F401  (registers contracts, terms, users)

    return Base.metadata


def create_tables() -> None:
    """Create the contracts, confirmation_terms and users tables if missing."""
    metadata = _metadata()
    metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(metadata.tables)})


def drop_tables() -> None:
    """Drop every record store table.  Tests and local tooling only."""
    metadata = _metadata()
    metadata.drop_all(get_engine())
    logger.info("tables_dropped", extra={"tables": sorted(metadata.tables)})


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


atexit.register(reset_engine)
