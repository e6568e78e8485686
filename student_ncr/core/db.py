# student_ncr/core/db.py - SQLAlchemy database setup with connection pooling
from sqlalchemy import create_engine, text, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool, QueuePool
from sqlalchemy.exc import SQLAlchemyError
from typing import Generator, Iterator, Optional
import logging
import time
import threading
from contextlib import contextmanager

from student_ncr.core.config import settings
from student_ncr.core.errors import DataSourceUnavailable

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Read-only database access with connection pooling and health monitoring"""

    def __init__(self):
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self._initialized = False
        self._lock = threading.Lock()

    def initialize(self):
        """Initialize database engine and session maker"""
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            try:
                self.engine = self._create_engine()
                self.SessionLocal = sessionmaker(
                    autocommit=False,
                    autoflush=False,
                    bind=self.engine
                )

                self._setup_event_listeners()
                self._test_connection()

                self._initialized = True
                logger.info("Database initialized successfully")

            except Exception as e:
                logger.error(f"Failed to initialize database: {e}")
                raise

    def _create_engine(self) -> Engine:
        """Create SQLAlchemy engine for the configured backend"""
        is_sqlite = settings.DATABASE_URL.startswith("sqlite")

        engine_args = {
            "url": settings.DATABASE_URL,
            "echo": settings.DATABASE_ECHO,
        }

        if is_sqlite:
            engine_args.update({
                "poolclass": StaticPool,
                "connect_args": {
                    "check_same_thread": False,
                    "timeout": 30,  # seconds to wait on SQLite locks
                },
            })
        else:
            engine_args.update({
                "poolclass": QueuePool,
                "pool_size": settings.DATABASE_POOL_SIZE,
                "max_overflow": settings.DATABASE_MAX_OVERFLOW,
                "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
                "pool_recycle": settings.DATABASE_POOL_RECYCLE,
                "pool_pre_ping": True,
                "connect_args": {
                    "connect_timeout": 10,
                    "application_name": f"student_ncr_{settings.ENV}",
                    "options": "-c timezone=UTC",
                },
            })

        return create_engine(**engine_args)

    def _setup_event_listeners(self):
        """Log slow queries in development"""

        @event.listens_for(self.engine, "before_cursor_execute")
        def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if settings.is_development:
                context._query_start_time = time.time()

        @event.listens_for(self.engine, "after_cursor_execute")
        def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if settings.is_development and hasattr(context, "_query_start_time"):
                total = time.time() - context._query_start_time
                if total > settings.SLOW_QUERY_THRESHOLD_SECONDS:
                    logger.warning(f"Slow query ({total:.3f}s): {statement[:100]}...")

    def _test_connection(self):
        """Test database connection and log status"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()

                if "postgresql" in settings.DATABASE_URL:
                    db_info = conn.execute(text("SELECT version()")).fetchone()
                    logger.info(f"Connected to PostgreSQL: {db_info[0][:50]}...")
                elif "sqlite" in settings.DATABASE_URL:
                    db_info = conn.execute(text("SELECT sqlite_version()")).fetchone()
                    logger.info(f"Connected to SQLite: {db_info[0]}")

        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            raise

    def _open_session(self) -> Session:
        """Open a session, reporting an unreachable database as DataSourceUnavailable"""
        try:
            if not self._initialized:
                self.initialize()
            return self.SessionLocal()
        except SQLAlchemyError as e:
            logger.error(f"Database unavailable: {e}")
            raise DataSourceUnavailable(f"Could not connect to database at {settings.database_location}") from e

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a read-only database session with automatic cleanup.

        Yields:
            Session: SQLAlchemy database session

        Raises:
            DataSourceUnavailable: the database cannot be reached
        """
        session = self._open_session()
        try:
            yield session
        finally:
            session.rollback()
            session.close()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Context manager for read-only work outside of a request.

        Usage:
            with db_manager.session_scope() as session:
                ClassificationService(session).classify("2425", "FA", 1001)

        Nothing is ever committed; the session is rolled back on exit.
        """
        session = self._open_session()
        try:
            yield session
        finally:
            session.rollback()
            session.close()

    def health_check(self) -> dict:
        """
        Perform database health check.

        Returns:
            Dict with health status information
        """
        try:
            if not self._initialized:
                self.initialize()

            start_time = time.time()

            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            status = {
                "status": "healthy",
                "response_time_ms": round((time.time() - start_time) * 1000, 2),
                "database_url": settings.database_location,
            }

            pool = self.engine.pool
            if isinstance(pool, QueuePool):
                status["pool"] = {
                    "size": pool.size(),
                    "checked_out": pool.checkedout(),
                    "overflow": pool.overflow(),
                    "checked_in": pool.checkedin(),
                }
            return status

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    def close(self):
        """Close database connections and cleanup"""
        if self.engine:
            self.engine.dispose()
            logger.info("Database connections closed")


# Create global database manager instance
db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency to get database session.

    Usage in FastAPI:
        @router.get("/terms")
        def list_terms(db: Session = Depends(get_db)):
            return SqlTermCalendar(db).list_terms_ordered_by_begin_date()
    """
    yield from db_manager.get_session()


def get_engine() -> Engine:
    """Get SQLAlchemy engine instance"""
    if not db_manager._initialized:
        db_manager.initialize()
    return db_manager.engine


def session_scope():
    """Read-only session context manager (convenience function)"""
    return db_manager.session_scope()


def health_check() -> dict:
    """Get database health status (convenience function)"""
    return db_manager.health_check()


__all__ = [
    "get_db",
    "get_engine",
    "session_scope",
    "health_check",
    "db_manager",
]
