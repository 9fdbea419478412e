"""Durable Store - async partitioned key-value persistence for shelf records.

Invariants:
    - open() is idempotent and registers every configured partition
    - A failed open() is sticky: every later call on the handle raises StoreUnavailableError
    - replace_all() is one transaction: delete the partition's rows, insert the new ones;
      a failure rolls back and the previous contents stay readable
    - load_all() returns records in the position order they were written
    - Transactions on one handle run one at a time, in submission order
    - Every exception raised inside a session (SQLAlchemy or driver, e.g. OverflowError)
      is mapped to DatabaseError (core/errors.py) after rollback; no retries

Design Decisions:
    - SQLAlchemy asyncio engine: aiosqlite for the on-device default, asyncpg when
      configured with a Postgres URL
    - In-memory SQLite uses StaticPool so every session sees the same database
    - FIFO asyncio.Lock around transactions: SQLite allows one writer, and callers rely
      on same-partition writes landing in submission order
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager

from sqlalchemy import delete, insert, select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

from mindpalace.core.errors import (
    DatabaseError, ErrorContext, RecordValidationError,
    StoreUnavailableError, UnknownPartitionError,
)
from mindpalace.db.base import Base
from mindpalace.models.shelf_record import PartitionRecord, ShelfRecord

logger = logging.getLogger(__name__)


def _engine_kwargs(database_url: str, echo: bool) -> dict:
    url = make_url(database_url)
    kwargs: dict = {"echo": echo}
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(pool_pre_ping=True, pool_recycle=3600)
    return kwargs


_FAILURE_REASONS: tuple[tuple[type[Exception], str], ...] = (
    (IntegrityError, "duplicate or invalid shelf key"),
    (OperationalError, "database unreachable or locked"),
    (DBAPIError, "database driver error"),
    (OverflowError, "value out of range for the shelves table"),
)


def _failure_reason(exc: Exception) -> str:
    """User-facing reason; engine messages stay in the log."""
    for exc_type, reason in _FAILURE_REASONS:
        if isinstance(exc, exc_type):
            return reason
    return "database operation failed"


def _shelf_rows(partition: str, shelves: Sequence[dict]) -> list[dict]:
    try:
        return [
            {
                "partition": partition,
                "id": int(shelf["id"]),
                "position": position,
                "title": shelf["title"],
                "items": list(shelf.get("items", [])),
            }
            for position, shelf in enumerate(shelves)
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise RecordValidationError(
            f"Shelf record for '{partition}' is malformed: {e}", field="shelves",
        ) from e


class DurableStore:
    """Named partitions of shelf records keyed by shelf id."""

    def __init__(
        self, database_url: str, partitions: Sequence[str], echo: bool = False,
    ):
        self.engine = create_async_engine(database_url, **_engine_kwargs(database_url, echo))
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.partitions: tuple[str, ...] = tuple(partitions)
        self._opened = False
        self._open_error: DatabaseError | None = None
        self._txn_lock = asyncio.Lock()

    @asynccontextmanager
    async def _session(
        self, operation: str, partition: str | None = None,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            reason = _failure_reason(e)
            logger.error(
                f"{operation} on {partition or 'schema'} rolled back ({reason}): {e}",
                extra={"partition": partition, "error_code": "DATABASE_ERROR"},
            )
            raise DatabaseError(
                reason, operation, ErrorContext(partition=partition),
            ) from e
        finally:
            await session.close()

    def _require_partition(self, partition: str) -> None:
        if partition not in self.partitions:
            raise UnknownPartitionError(partition)

    async def open(self) -> None:
        """Create missing tables and partitions. Idempotent; failure is sticky."""
        if self._open_error is not None:
            raise StoreUnavailableError(self._open_error.message)
        if self._opened:
            return
        async with self._txn_lock:
            if self._opened:
                return
            try:
                await self._create_schema()
            except DatabaseError as e:
                self._open_error = e
                raise
            self._opened = True
        logger.info(
            f"Durable store opened with partitions: {', '.join(self.partitions)}",
        )

    async def _create_schema(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            logger.error(f"DB schema creation failed: {e}")
            raise DatabaseError("Could not create schema", "open") from e
        async with self._session("open") as db:
            result = await db.execute(select(PartitionRecord.name))
            existing = set(result.scalars())
            db.add_all(
                PartitionRecord(name=name)
                for name in self.partitions if name not in existing
            )
            await db.commit()

    async def replace_all(self, partition: str, shelves: Sequence[dict]) -> None:
        """Atomically replace a partition's contents with shelves, in order."""
        await self.open()
        self._require_partition(partition)
        rows = _shelf_rows(partition, shelves)
        async with self._txn_lock:
            async with self._session("replace_all", partition) as db:
                await db.execute(
                    delete(ShelfRecord).where(ShelfRecord.partition == partition),
                )
                if rows:
                    await db.execute(insert(ShelfRecord), rows)
                await db.commit()
        logger.debug(
            f"Replaced partition {partition}",
            extra={"partition": partition, "shelf_count": len(rows)},
        )

    async def load_all(self, partition: str) -> list[dict]:
        """Every shelf record in the partition, in write order."""
        await self.open()
        self._require_partition(partition)
        async with self._txn_lock:
            async with self._session("load_all", partition) as db:
                result = await db.execute(
                    select(ShelfRecord)
                    .where(ShelfRecord.partition == partition)
                    .order_by(ShelfRecord.position),
                )
                return [row.to_record() for row in result.scalars()]

    async def health_check(self) -> bool:
        """Check durable store connectivity (for readiness probes)."""
        try:
            await self.open()
            async with self._txn_lock:
                async with self._session("health_check") as db:
                    await db.execute(text("SELECT 1"))
            return True
        except (DatabaseError, StoreUnavailableError) as e:
            logger.error(f"Durable store health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
