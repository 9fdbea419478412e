"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by infrastructure/ via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no base class
"""

from collections.abc import Sequence
from typing import Protocol


class ShelfRepository(Protocol):
    """Contract for the partitioned durable store - implemented by DurableStore."""
    async def open(self) -> None: ...
    async def replace_all(self, partition: str, shelves: Sequence[dict]) -> None: ...
    async def load_all(self, partition: str) -> list[dict]: ...


class FileSaver(Protocol):
    """Hands an export payload to the user (download, backup folder, ...)."""
    async def save(self, filename: str, payload: str) -> None: ...


class FileReader(Protocol):
    """Decodes an uploaded snapshot file to text."""
    async def read_text(self) -> str: ...


class ConfirmPrompt(Protocol):
    """Asks the user to confirm a destructive action."""
    def __call__(self) -> bool: ...
