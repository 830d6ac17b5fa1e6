"""Database Session Manager - async engine for the notification and merge-commit stores.

Invariants:
    - Every session auto-rolls-back on exception: a failed list mutation never half-renumbers
    - SQLAlchemy exceptions leave as DatabaseError naming the store operation that failed,
      with the list owner in ErrorContext when the operation has one
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: stores build NotificationEntry values from rows after commit
    - The caller labels each session (operation, owner_id) so a failure in the logs
      says "move for owner 7" rather than just "commit failed"
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from triagebot.core.errors import DatabaseError, ErrorContext

logger = logging.getLogger(__name__)

# Checked in order: most specific SQLAlchemy class first
_FAILURE_KINDS: tuple[tuple[type[SQLAlchemyError], str], ...] = (
    (IntegrityError, "Integrity constraint violated"),
    (OperationalError, "Connection or operational error"),
    (DBAPIError, "Database driver error"),
    (SQLAlchemyError, "Database operation failed"),
)


def _describe(error: SQLAlchemyError) -> str:
    for kind, description in _FAILURE_KINDS:
        if isinstance(error, kind):
            return description
    return "Database operation failed"


class DatabaseSessionManager:
    """Manages async sessions for the stores, with rollback and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, operation: str = "query", owner_id: int | None = None,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Session for one store operation; rolls back and raises DatabaseError on failure."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            description = _describe(e)
            logger.error(
                f"DB {operation} failed ({description}): {e}",
                extra={"owner_id": owner_id, "error_code": "DATABASE_ERROR"},
            )
            raise DatabaseError(
                description, operation, ErrorContext(owner_id=owner_id),
            ) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session("health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager

