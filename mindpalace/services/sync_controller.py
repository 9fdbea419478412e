"""Sync Controller - startup load-and-seed and gated write-through to the durable store.

Invariants:
    - No durable write is scheduled while the store is loading (the load gate)
    - The startup load result (origin LOAD) is never written back
    - FORCED changes are not written through: import/reset call persist_now() themselves
    - Writes to one partition complete in submission order (one PartitionWriter each)
    - Load and persist failures are logged and counted, never raised into mutations,
      never retried, and never roll back in-memory state
    - The loading state ends after both partitions were attempted, even if open() failed
    - persist_now() after close(), or waiting on a controller never started, raises
      RuntimeError instead of blocking forever

Design Decisions:
    - Per-partition background task queue instead of detached fire-and-forget tasks:
      ordering is explicit and failures are observable via stats()
    - Records are serialized when the write is enqueued, so a queued write persists the
      collection as it was at that transition
"""

import asyncio
import contextlib
import logging
from dataclasses import asdict, dataclass

from mindpalace.core.collection_store import CollectionStore
from mindpalace.core.domain_types import ChangeOrigin, CollectionKind
from mindpalace.core.repository_protocols import ShelfRepository
from mindpalace.core.snapshot import dump_shelves, load_shelves

logger = logging.getLogger(__name__)


@dataclass
class WriteStats:
    """Observable outcome counters for one partition."""
    submitted: int = 0
    succeeded: int = 0
    failed: int = 0
    last_error: str | None = None


@dataclass
class _WriteJob:
    records: list[dict]
    done: asyncio.Future | None = None


class PartitionWriter:
    """Background queue of full-collection writes for one partition."""

    def __init__(self, durable: ShelfRepository, kind: CollectionKind):
        self.kind = kind
        self.partition = kind.partition
        self.stats = WriteStats()
        self._durable = durable
        self._queue: asyncio.Queue[_WriteJob] | None = None
        self._worker: asyncio.Task | None = None
        self._closed = False

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue else 0

    def start(self) -> None:
        if self._worker is None:
            self._queue = asyncio.Queue()
            self._worker = asyncio.create_task(
                self._run(), name=f"partition-writer-{self.partition}",
            )

    def submit(self, records: list[dict], wait: bool = False) -> asyncio.Future | None:
        """Enqueue a replacement; with wait=True returns a future settled by the write."""
        if self._closed:
            raise RuntimeError(f"Writer for {self.partition} is closed")
        if self._queue is None:
            raise RuntimeError(f"Writer for {self.partition} is not started")
        done = asyncio.get_running_loop().create_future() if wait else None
        self._queue.put_nowait(_WriteJob(records, done))
        self.stats.submitted += 1
        return done

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._durable.replace_all(self.partition, job.records)
            except Exception as e:
                self.stats.failed += 1
                self.stats.last_error = str(e)
                logger.error(
                    f"Failed to persist {self.kind.value} shelves: {e}",
                    extra={
                        "partition": self.partition,
                        "error_code": "PERSIST_FAILURE",
                        "pending": self._queue.qsize(),
                    },
                )
                if job.done is not None and not job.done.done():
                    job.done.set_exception(e)
            else:
                self.stats.succeeded += 1
                if job.done is not None and not job.done.done():
                    job.done.set_result(None)
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued write has been attempted."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Drain, then stop the worker; later submits raise."""
        await self.drain()
        self._closed = True
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None


class SyncController:
    """Mirrors a CollectionStore into a ShelfRepository."""

    def __init__(self, store: CollectionStore, durable: ShelfRepository):
        self._store = store
        self._durable = durable
        self._writers = {kind: PartitionWriter(durable, kind) for kind in CollectionKind}
        self._loaded = asyncio.Event()
        self._started = False
        self._unsubscribe = store.subscribe(self._on_change)

    async def start(self) -> None:
        """Open the durable store, load both partitions, then end the loading state."""
        self._started = True
        for writer in self._writers.values():
            writer.start()
        try:
            await self._durable.open()
            for kind in CollectionKind:
                await self._load(kind)
        except Exception as e:
            logger.error(
                f"Durable store unavailable, keeping default shelves: {e}",
                extra={"error_code": "LOAD_FAILURE"},
            )
        finally:
            self._store.finish_loading()
            self._loaded.set()

    async def _load(self, kind: CollectionKind) -> None:
        try:
            records = await self._durable.load_all(kind.partition)
            shelves = load_shelves(kind, records)
        except Exception as e:
            logger.warning(
                f"Failed to load {kind.value} shelves, using defaults: {e}",
                extra={
                    "collection": kind.value,
                    "partition": kind.partition,
                    "error_code": "LOAD_FAILURE",
                },
            )
            return
        if not shelves:
            logger.info(
                f"No stored {kind.value} shelves, keeping defaults",
                extra={"collection": kind.value},
            )
            return
        self._store.load(kind, shelves)
        logger.info(
            f"Loaded {kind.value} shelves",
            extra={"collection": kind.value, "shelf_count": len(shelves)},
        )

    def _on_change(
        self, kind: CollectionKind, shelves: tuple, origin: ChangeOrigin,
    ) -> None:
        if self._store.is_loading:
            return
        if origin is not ChangeOrigin.MUTATION:
            return
        self._writers[kind].submit(dump_shelves(shelves))

    async def persist_now(self, kind: CollectionKind) -> None:
        """Write the current collection behind any pending writes and wait for it.

        Raises whatever the durable store raised, or RuntimeError once closed.
        """
        done = self._writers[kind].submit(
            dump_shelves(self._store.get(kind)), wait=True,
        )
        await done

    async def wait_until_loaded(self) -> None:
        if not self._started:
            raise RuntimeError("Sync controller was never started")
        await self._loaded.wait()

    async def drain(self) -> None:
        for writer in self._writers.values():
            await writer.drain()

    def stats(self) -> dict[str, dict]:
        return {kind.value: asdict(writer.stats) for kind, writer in self._writers.items()}

    async def close(self) -> None:
        """Drain every queue, then stop the writers. Safe to call twice."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for writer in self._writers.values():
            await writer.close()
