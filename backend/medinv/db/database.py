"""
Database access: async engine, connection limits and transaction scopes.

One Database instance is created by the application factory and shared by
every request through app.state. Nothing here runs at import time: the
engine exists only between init() and shutdown().

Two ways to use a connection:
- connect() / fetch_all(): pooled connection per query, released on exit.
- transaction(): one dedicated connection for a multi-statement unit of
  work, committed on success and rolled back on any error.

Both go through a ConnectionGate that caps concurrent connections and the
number of callers allowed to wait for one.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from medinv.core.config import Settings
from medinv.core.exceptions import ConnectionExhausted
from medinv.db.errors import StorageErrorKind, translate_db_error

logger = logging.getLogger(__name__)

SQLITE_ISOLATION_LEVELS = ("READ UNCOMMITTED", "SERIALIZABLE")


class ConnectionGate:
    """
    Caps concurrent connections at `limit`.

    Callers arriving while all slots are taken wait in a queue of at most
    `queue_limit` callers (0 = unbounded). A caller that finds the queue full,
    or waits longer than `timeout` seconds, gets ConnectionExhausted.
    """

    def __init__(self, limit: int, queue_limit: int = 0, timeout: Optional[float] = None):
        self.limit = limit
        self.queue_limit = queue_limit
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(limit)
        self.in_use = 0
        self.waiting = 0

    async def acquire(self) -> None:
        if self._semaphore.locked():
            if self.queue_limit and self.waiting >= self.queue_limit:
                logger.warning(
                    f"Connection queue full ({self.waiting} waiting, {self.in_use}/{self.limit} in use)"
                )
                raise ConnectionExhausted(
                    details=f"{self.in_use} connections in use and {self.waiting} callers waiting"
                )
            self.waiting += 1
            try:
                await asyncio.wait_for(self._semaphore.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Timed out after {self.timeout}s waiting for a database connection")
                raise ConnectionExhausted(
                    details=f"No connection available within {self.timeout} seconds"
                )
            finally:
                self.waiting -= 1
        else:
            await self._semaphore.acquire()
        self.in_use += 1

    def release(self) -> None:
        self.in_use -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    def stats(self) -> Dict[str, int]:
        return {
            "in_use": self.in_use,
            "waiting": self.waiting,
            "limit": self.limit,
            "queue_limit": self.queue_limit,
        }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    if settings.is_sqlite:
        # SQLite: NullPool, each checkout opens its own file handle
        engine = create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            poolclass=NullPool,
            connect_args={"timeout": settings.DB_ACQUIRE_TIMEOUT_SECONDS},
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # MySQL/PostgreSQL: QueuePool sized to the gate so checkout never queues twice
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_CONNECTION_LIMIT,
        max_overflow=0,
        pool_timeout=settings.DB_ACQUIRE_TIMEOUT_SECONDS,
        pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
    )


class Database:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.gate: Optional[ConnectionGate] = None

    async def init(self) -> None:
        if self.engine is not None:
            return
        level = self.settings.ORDER_ISOLATION_LEVEL
        if self.settings.is_sqlite and level and level not in SQLITE_ISOLATION_LEVELS:
            raise ValueError(
                f"SQLite supports only {', '.join(SQLITE_ISOLATION_LEVELS)} isolation; got {level}"
            )
        self.engine = create_engine_from_settings(self.settings)
        self.gate = ConnectionGate(
            limit=self.settings.DB_CONNECTION_LIMIT,
            queue_limit=self.settings.DB_QUEUE_LIMIT,
            timeout=self.settings.DB_ACQUIRE_TIMEOUT_SECONDS,
        )
        logger.info(
            f"Database pool ready ({self.engine.url.render_as_string(hide_password=True)}, "
            f"limit={self.gate.limit}, queue={self.gate.queue_limit})"
        )

    async def shutdown(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.gate = None
        logger.info("Database pool closed")

    async def close_all(self) -> None:
        """Close every idle pooled connection. New connections open lazily on next use."""
        await self._require_engine().dispose()
        logger.info("All pooled database connections closed")

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("Database.init() has not been called")
        return self.engine

    def stats(self) -> Dict[str, Any]:
        if self.gate is None:
            return {"initialized": False}
        return {"initialized": True, **self.gate.stats()}

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncConnection]:
        """Pooled connection for one read, released as soon as the block exits."""
        engine = self._require_engine()
        async with self.gate.slot():
            try:
                async with engine.connect() as conn:
                    yield conn
            except SQLAlchemyError as e:
                raise _storage_error(e) from e

    @asynccontextmanager
    async def transaction(self, isolation_level: Optional[str] = None) -> AsyncIterator[AsyncConnection]:
        """
        Dedicated connection inside one transaction.

        Commits when the block exits normally. Any exception rolls back all
        work done in the block before propagating. The connection is returned
        to the pool on every path.
        """
        engine = self._require_engine()
        if isolation_level:
            engine = engine.execution_options(isolation_level=isolation_level)
        async with self.gate.slot():
            try:
                async with engine.connect() as conn:
                    trans = await conn.begin()
                    try:
                        yield conn
                    except BaseException:
                        if trans.is_active:
                            try:
                                await trans.rollback()
                            except SQLAlchemyError:
                                # Connection already broken; the original error is the one to report
                                logger.exception("Rollback failed")
                            else:
                                logger.info("Transaction rolled back")
                        raise
                    await trans.commit()
            except SQLAlchemyError as e:
                raise _storage_error(e) from e

    async def fetch_all(self, statement, params: Optional[dict] = None) -> List[Dict[str, Any]]:
        async with self.connect() as conn:
            result = await conn.execute(statement, params or {})
            return [dict(row) for row in result.mappings().all()]

    async def fetch_one(self, statement, params: Optional[dict] = None) -> Optional[Dict[str, Any]]:
        async with self.connect() as conn:
            result = await conn.execute(statement, params or {})
            row = result.mappings().first()
            return dict(row) if row is not None else None

    async def run_sync(self, fn, *args, **kwargs):
        """Run `fn(sync_connection, ...)` in a committed transaction (schema setup, seeding)."""
        async with self.transaction() as conn:
            return await conn.run_sync(fn, *args, **kwargs)


def _storage_error(error: SQLAlchemyError):
    translated = translate_db_error(error)
    if translated.kind is StorageErrorKind.CONNECTION_LIMIT:
        return ConnectionExhausted(details=translated.message)
    return translated
