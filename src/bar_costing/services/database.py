"""
SQLite engine and session handling for the production and loss ledgers.

This module provides:
- A lazily created module-wide engine and session factory
- session_scope(), the transaction boundary every ledger write goes through
- Table creation, verification and reset helpers

Connections enforce foreign keys so ledger rows that reference a deleted
batch have the reference cleared rather than left dangling. File databases
use a bounded busy timeout: a write blocked by another writer fails with an
error after config.database_timeout seconds instead of waiting forever.
"""

from typing import Any, Callable, Optional, TypeVar
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..utils.config import get_config
from ..models.base import Base
from .exceptions import DatabaseError
from .logging_utils import log_operation

logger = logging.getLogger(__name__)

LEDGER_TABLES = ("production_batches", "loss_entries", "sub_recipe_depletions")

T = TypeVar("T")

_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign keys and WAL journaling on every new SQLite connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def _is_memory_url(database_url: str) -> bool:
    return ":memory:" in database_url or "mode=memory" in database_url


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Build an engine for the ledger database.

    In-memory databases share one connection (StaticPool) so every session
    sees the same tables.

    Args:
        database_url: SQLAlchemy URL; None uses the configured database
        echo: Log emitted SQL

    Returns:
        Engine
    """
    config = get_config()
    if database_url is None:
        config.ensure_directories()
        database_url = config.database_url

    logger.info(f"Creating database engine: {database_url}")

    connect_args = {"check_same_thread": False}
    if _is_memory_url(database_url):
        return create_engine(
            database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool
        )

    connect_args["timeout"] = config.database_timeout
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def init_database(engine: Optional[Engine] = None) -> None:
    """
    Create the ledger tables if they are missing.

    Args:
        engine: Engine to use; None uses the module engine
    """
    if engine is None:
        engine = get_engine()

    # Importing the package registers every model on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Ledger tables ready")


def get_engine(force_recreate: bool = False) -> Engine:
    """Return the module engine, creating it on first use."""
    global _engine

    if _engine is None or force_recreate:
        _engine = create_database_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    """
    Return the module session factory, creating it on first use.

    Sessions keep attribute values after commit (expire_on_commit=False) so
    ledger functions can build result dicts after their scope closes.
    """
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


def get_session() -> Session:
    """Open a new session from the module factory."""
    return get_session_factory()()


@contextmanager
def session_scope():
    """
    Transaction boundary for ledger operations.

    Commits when the block exits normally, rolls back and re-raises on any
    exception, and always closes the session.

    Yields:
        Database session

    Example:
        with session_scope() as session:
            session.add(ProductionBatch(sub_recipe_id="syrup-1", quantity_produced_ml=1000))
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def run_in_session(
    service_logger: logging.Logger,
    operation: str,
    impl: Callable[[Session], T],
    session: Optional[Session] = None,
    **context: Any,
) -> T:
    """
    Run a ledger operation in the caller's session or a new session_scope().

    With a caller-provided session, impl runs inside the caller's transaction
    and errors propagate unchanged. Otherwise the scope commits on success and
    SQLAlchemy failures are logged and raised as DatabaseError (no retry).
    Domain errors (validation, not-found) always propagate unchanged.

    Args:
        service_logger: Logger of the calling service module
        operation: Operation name, e.g. "submit_losses"
        impl: Work to run; receives the session
        session: Optional caller-provided session
        **context: Ids attached to the log records

    Returns:
        Whatever impl returns

    Raises:
        DatabaseError: If the owned transaction fails in SQLAlchemy
    """
    if session is not None:
        return impl(session)
    try:
        with session_scope() as own_session:
            result = impl(own_session)
    except SQLAlchemyError as e:
        log_operation(
            service_logger,
            operation=operation,
            outcome="error",
            level=logging.ERROR,
            error=str(e),
            **context,
        )
        raise DatabaseError(
            f"Failed to {operation.replace('_', ' ')}: {str(e)}", original_error=e
        )
    log_operation(
        service_logger, operation=operation, outcome="success", level=logging.DEBUG, **context
    )
    return result


def verify_database() -> bool:
    """
    Check that the database is reachable and holds the ledger tables.

    Returns:
        True if every ledger table exists
    """
    try:
        tables = set(inspect(get_engine()).get_table_names())
    except Exception as e:
        logger.error(f"Database verification failed: {e}")
        return False
    missing = [name for name in LEDGER_TABLES if name not in tables]
    if missing:
        logger.warning(f"Database is missing ledger tables: {missing}")
        return False
    return True


def reset_database(confirm: bool = False) -> None:
    """
    Drop and recreate every ledger table. All ledger data is lost.

    Args:
        confirm: Must be True; guards against accidental calls

    Raises:
        ValueError: If confirm is not True
    """
    if not confirm:
        raise ValueError("Must pass confirm=True to reset database. This will delete all data!")

    logger.warning("Resetting ledger database; all production and loss data will be lost")

    engine = get_engine()
    from .. import models  # noqa: F401

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)


def close_connections() -> None:
    """Dispose of the module engine and forget the session factory."""
    global _engine, _SessionFactory

    _SessionFactory = None
    if _engine is not None:
        _engine.dispose()
        _engine = None
    logger.info("Database connections closed")
