"""
Database engine and session management for the fraction ledger.
Uses SQLModel with SQLite for persistent storage.
Features Write-Ahead Logging (WAL) mode for improved concurrency.
"""

from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from typing import Optional
import logging
import threading

from config import get_settings

logger = logging.getLogger(__name__)

# Global engine instance
_engine: Optional[object] = None

# Guards the single shared connection of an in-memory engine
_connection_gate = threading.RLock()


def get_engine():
    """Get or create the database engine with WAL mode enabled."""
    global _engine
    if _engine is None:
        settings = get_settings()
        if settings.is_in_memory_database:
            # One shared connection, otherwise every session sees an empty database
            _engine = create_engine(
                settings.database_url,
                echo=settings.db_echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
            _gate_shared_connection(_engine)
        else:
            _engine = create_engine(
                settings.database_url,
                echo=settings.db_echo,
                connect_args={
                    "check_same_thread": False,  # Allow use across threads
                }
            )
            # Enable WAL mode for better concurrency
            _enable_wal_mode(_engine)
    return _engine


def _gate_shared_connection(engine):
    """
    Hand the shared in-memory connection to one thread at a time.

    A session holds the gate from checkout until it returns the connection
    (after commit, rollback or close), so a reader can neither see another
    session's uncommitted rows nor reset its open transaction on return.
    """
    @event.listens_for(engine, "checkout")
    def _acquire(dbapi_connection, connection_record, connection_proxy):
        _connection_gate.acquire()

    @event.listens_for(engine, "checkin")
    def _release(dbapi_connection, connection_record):
        _connection_gate.release()


def _enable_wal_mode(engine):
    """
    Enable SQLite WAL mode on every new connection for concurrent read/write.

    pysqlite's own transaction handling is switched off so SQLAlchemy emits
    BEGIN at the first statement of a session. All reads in one session then
    share a snapshot, and a reader never pairs a pool count from before a
    commit with holder balances from after it.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            # Enable WAL mode
            cursor.execute("PRAGMA journal_mode=WAL")
            # Set busy timeout to 5 seconds to handle concurrent access
            cursor.execute("PRAGMA busy_timeout=5000")
        except Exception as e:
            logger.warning(f"Could not enable WAL mode: {e}")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    logger.info("SQLite WAL mode enabled for concurrent access")


def reset_engine():
    """Dispose the current engine so the next call rebuilds it from settings."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None


def init_db():
    """Initialize the database and create all tables."""
    from models import Asset, Holding

    engine = get_engine()
    SQLModel.metadata.create_all(engine)
    logger.info("Database initialized")


def get_session():
    """Get a new database session."""
    return Session(get_engine())
