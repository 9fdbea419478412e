"""Fake Durable Store - in-memory ShelfRepository for sync/codec tests.

Invariants:
    - Every read and write deep-copies records (no aliasing with the caller)
    - writes records (partition, records) for every successful replace_all, in order
    - Failures raise DatabaseError, like the real store

Design Decisions:
    - Flat class, no inheritance: structural match for the ShelfRepository protocol
    - hold_loads() parks load_all() on an asyncio.Event so tests can mutate the
      collection store while the startup load is still in flight
"""

import asyncio
import copy

from mindpalace.core.errors import DatabaseError


class FakeDurableStore:
    """Partition name -> list of shelf records."""

    def __init__(self, partitions=("cafe_shelves", "audio_shelves")):
        self.partitions = {name: [] for name in partitions}
        self.writes: list[tuple[str, list[dict]]] = []
        self.fail_open = False
        self.fail_load: set[str] = set()
        self.fail_writes = False
        self.write_delay = 0.0
        self.opened = 0
        self._load_gate = asyncio.Event()
        self._load_gate.set()

    # -- Test controls ---------------------------------------------------------

    def seed(self, partition: str, records: list[dict]) -> None:
        self.partitions[partition] = copy.deepcopy(records)

    def hold_loads(self) -> None:
        self._load_gate.clear()

    def release_loads(self) -> None:
        self._load_gate.set()

    def written(self, partition: str) -> list[list[dict]]:
        return [records for name, records in self.writes if name == partition]

    # -- ShelfRepository -------------------------------------------------------

    async def open(self) -> None:
        self.opened += 1
        if self.fail_open:
            raise DatabaseError("cannot open fake store", "open")

    async def load_all(self, partition: str) -> list[dict]:
        await self._load_gate.wait()
        if partition in self.fail_load:
            raise DatabaseError("cannot read fake partition", "load_all")
        return copy.deepcopy(self.partitions[partition])

    async def replace_all(self, partition: str, shelves) -> None:
        if self.write_delay:
            await asyncio.sleep(self.write_delay)
        if self.fail_writes:
            raise DatabaseError("cannot write fake partition", "replace_all")
        self.partitions[partition] = copy.deepcopy(list(shelves))
        self.writes.append((partition, copy.deepcopy(list(shelves))))
