"""trackref process wiring - builds the configured store and the ToolDispatch.

Invariants:
    - Logging configured once, before any store is built
    - The SQL engine is disposed on exit, also when the body raises
    - store_backend=memory builds an empty InMemoryDocumentStore (development)

Design Decisions:
    - Async context manager rather than module globals: callers own the lifetime
      and tests can build as many dispatchers as they need
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from trackref.config import Settings, get_settings
from trackref.infrastructure.database import DatabaseSessionManager
from trackref.infrastructure.memory_document_store import InMemoryDocumentStore
from trackref.infrastructure.observability import setup_logging
from trackref.infrastructure.sql_document_store import SqlDocumentStore
from trackref.services.tool_dispatch import ToolDispatch

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncIterator[ToolDispatch]:
    """Startup/shutdown lifecycle yielding a ready ToolDispatch."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    db = None
    if settings.store_backend == "memory":
        store = InMemoryDocumentStore()
    else:
        db = DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        store = SqlDocumentStore(db)

    dispatch = ToolDispatch(
        store,
        default_limit=settings.default_query_limit,
        max_limit=settings.max_query_limit,
    )
    logger.info(f"trackref started ({settings.store_backend} store)")
    try:
        yield dispatch
    finally:
        if db is not None:
            await db.dispose()
        logger.info("trackref shutting down")
