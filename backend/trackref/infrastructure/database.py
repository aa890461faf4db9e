"""Database Session Manager - async connection pool with rollback and store-error mapping.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - SQLAlchemy exceptions leave this module only as StoreConnectionError,
      StoreAuthError or StoreError (core/errors.py)
    - No retries: transient failures propagate to the caller

Design Decisions:
    - Authentication failures recognised by SQLSTATE class 28 on the driver error
    - expire_on_commit=False: prevents lazy-load issues in async context
    - SQLite URLs skip pool sizing (the sqlite dialects reject those arguments)
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

from trackref.core.errors import StoreAuthError, StoreConnectionError, StoreError
from trackref.db.base import Base
import trackref.models  # noqa: F401

logger = logging.getLogger(__name__)

_AUTH_SQLSTATE_CLASS = "28"


def _is_auth_failure(exc: DBAPIError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return isinstance(sqlstate, str) and sqlstate.startswith(_AUTH_SQLSTATE_CLASS)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, operation: str = "execute",
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback and store-error mapping."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise StoreError("Integrity constraint violated", operation)
        except OperationalError as e:
            await session.rollback()
            if _is_auth_failure(e):
                logger.error(f"DB authentication failed: {e}")
                raise StoreAuthError("Authentication rejected", operation)
            logger.error(f"DB operational error: {e}")
            raise StoreConnectionError("Connection or operational error", operation)
        except DBAPIError as e:
            await session.rollback()
            if _is_auth_failure(e):
                logger.error(f"DB authentication failed: {e}")
                raise StoreAuthError("Authentication rejected", operation)
            logger.error(f"DB driver error: {e}")
            raise StoreConnectionError("Database driver error", operation)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise StoreError("Database operation failed", operation)
        except OSError as e:
            await session.rollback()
            logger.error(f"DB socket error: {e}")
            raise StoreConnectionError("Store unreachable", operation)
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create tables directly (development and tests; deployments use alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.session("health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except StoreError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
