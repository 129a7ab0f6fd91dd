"""
Database Connection Management.

Wraps a SQLAlchemy engine and session factory for the persistent backend:
- Connection pooling (QueuePool for server databases)
- Transaction-scoped sessions via get_session()
- SQLite transactions opened with BEGIN IMMEDIATE, one writer at a time
  across every connection to the file
- Health checks
"""
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from datameq.core.config import get_settings
from datameq.core.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseConnection:
    """
    Manages database connections and session lifecycle.

    Example:
        >>> db = DatabaseConnection("sqlite:///datameq.db")
        >>> with db.get_session() as session:
        ...     session.execute(text("SELECT 1"))
    """

    def __init__(self, connection_url: Optional[str] = None):
        """
        Initialize database engine.

        Args:
            connection_url: Optional connection URL. If not provided, uses settings.
        """
        db_url = connection_url or get_settings().database_url
        self.url = db_url
        self.is_sqlite = db_url.startswith("sqlite")

        if self.is_sqlite:
            # Request threads share the engine; SQLite needs this flag for that
            self.engine = create_engine(
                db_url,
                connect_args={"check_same_thread": False, "timeout": 30},
                echo=False,
            )
            event.listen(self.engine, "connect", _sqlite_on_connect)
            event.listen(self.engine, "begin", _sqlite_on_begin)
        else:
            # pool_pre_ping: Test connections before using (handles stale connections)
            self.engine = create_engine(
                db_url,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                echo=False,
            )

        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        logger.info(f"Database connection initialized: {db_url.split('@')[-1] if '@' in db_url else db_url}")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session scoped to one transaction.

        Commits when the block exits normally. Any exception (store error or
        a domain refusal raised mid-transaction) rolls back, so a transaction
        is either fully applied or not at all.

        Yields:
            SQLAlchemy Session object
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error, rolling back: {e}")
            raise
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def check_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection is healthy, False otherwise.
        """
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            logger.debug("Database connection check: OK")
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    def close(self):
        """Close all connections in the pool."""
        self.engine.dispose()
        logger.info("Database connections closed")


def _sqlite_on_connect(dbapi_connection, connection_record):
    # pysqlite defers BEGIN until the first write; _sqlite_on_begin emits it instead
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_on_begin(conn):
    # Take the write lock up front so a read-then-delete cannot interleave
    # with another connection's
    conn.exec_driver_sql("BEGIN IMMEDIATE")


# Module-level instance (singleton pattern)
_db_connection: Optional[DatabaseConnection] = None


def get_database() -> DatabaseConnection:
    """
    Get or create the database connection instance.

    Lazy so that importing this module never opens a connection.
    """
    global _db_connection
    if _db_connection is None:
        _db_connection = DatabaseConnection()
    return _db_connection


def reset_database() -> None:
    """Dispose and forget the singleton (useful for testing)."""
    global _db_connection
    if _db_connection is not None:
        _db_connection.close()
    _db_connection = None
