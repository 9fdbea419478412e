"""File Transfer - file-save and file-read collaborators for snapshots.

Invariants:
    - DirectoryFileSaver never leaves a half-written backup under the final name
    - Filenames are reduced to their basename; saves cannot escape the directory
    - Blocking file IO runs in a worker thread (asyncio.to_thread)
"""

import asyncio
import os
from pathlib import Path


def _write_atomic(path: Path, payload: str) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    path.parent.mkdir(parents=True, exist_ok=True)
    with tmp_path.open("w", encoding="utf-8") as handle:
        handle.write(payload)
        handle.flush()
        os.fsync(handle.fileno())
    tmp_path.replace(path)


class DirectoryFileSaver:
    """Writes each export into a backup directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    async def save(self, filename: str, payload: str) -> None:
        path = self.directory / Path(filename).name
        await asyncio.to_thread(_write_atomic, path, payload)


class MemoryFileSaver:
    """Keeps saved payloads in memory - the HTTP export route streams them back."""

    def __init__(self):
        self.saved: list[tuple[str, str]] = []

    async def save(self, filename: str, payload: str) -> None:
        self.saved.append((filename, payload))

    @property
    def last(self) -> tuple[str, str] | None:
        return self.saved[-1] if self.saved else None


class PathFileReader:
    """Reads an uploaded snapshot from disk as UTF-8 text."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def read_text(self) -> str:
        return await asyncio.to_thread(self.path.read_text, encoding="utf-8")
