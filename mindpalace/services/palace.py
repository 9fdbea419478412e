"""Mind Palace Handle - one explicitly constructed instance wiring store, sync and codec.

Invariants:
    - Collaborators hold a MindPalace handle; there is no module-level instance
    - start() must complete before the handle leaves the loading state
    - close() drains every pending durable write before disposing the engine

Design Decisions:
    - Dependencies injectable (durable store, saver, id source) so tests can build
      independent handles over in-memory SQLite or fakes
    - open_palace() mirrors the FastAPI lifespan: start on enter, close on exit
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from mindpalace.config import Settings, get_settings
from mindpalace.core.collection_store import CollectionStore
from mindpalace.core.domain_types import CollectionKind
from mindpalace.core.id_source import IdSource
from mindpalace.core.repository_protocols import (
    ConfirmPrompt, FileReader, FileSaver, ShelfRepository,
)
from mindpalace.infrastructure.durable_store import DurableStore
from mindpalace.infrastructure.file_transfer import DirectoryFileSaver
from mindpalace.services.snapshot_codec import SnapshotCodec
from mindpalace.services.sync_controller import SyncController

logger = logging.getLogger(__name__)


class MindPalace:
    """Session handle: read state, mutate through .store, snapshot through the codec."""

    def __init__(
        self,
        settings: Settings | None = None,
        durable: ShelfRepository | None = None,
        saver: FileSaver | None = None,
        id_source: IdSource | None = None,
    ):
        self.settings = settings or get_settings()
        self.durable = durable or DurableStore(
            self.settings.database_url,
            partitions=[kind.partition for kind in CollectionKind],
            echo=self.settings.database_echo,
        )
        self.store = CollectionStore(id_source)
        self.sync = SyncController(self.store, self.durable)
        self.codec = SnapshotCodec(
            self.store,
            self.sync,
            saver=saver or DirectoryFileSaver(self.settings.export_dir),
            backup_prefix=self.settings.backup_prefix,
            strict_shape=self.settings.strict_import_shape,
        )

    @property
    def is_loading(self) -> bool:
        return self.store.is_loading

    @property
    def ingredient_shelves(self) -> tuple:
        return self.store.ingredient_shelves

    @property
    def media_shelves(self) -> tuple:
        return self.store.media_shelves

    async def start(self) -> None:
        await self.sync.start()

    async def close(self) -> None:
        await self.sync.close()
        dispose = getattr(self.durable, "dispose", None)
        if dispose is not None:
            await dispose()
        logger.info("Mind Palace closed")

    # --- Collaborator entry points ---------------------------------------------

    def move(
        self, source_shelf_id: int, source_index: int,
        target_shelf_id: int, target_index: int | None = None,
    ) -> tuple:
        return self.store.move(source_shelf_id, source_index, target_shelf_id, target_index)

    async def export_snapshot(self, saver: FileSaver | None = None) -> None:
        await self.codec.export_snapshot(saver)

    async def import_snapshot(self, raw_text: str) -> bool:
        return await self.codec.import_snapshot(raw_text)

    async def import_from(self, reader: FileReader) -> bool:
        return await self.codec.import_from(reader)

    async def reset_to_defaults(self, confirm: ConfirmPrompt | None = None) -> bool:
        return await self.codec.reset_to_defaults(confirm)

    async def health_check(self) -> bool:
        check = getattr(self.durable, "health_check", None)
        return await check() if check is not None else True


@asynccontextmanager
async def open_palace(
    settings: Settings | None = None, **kwargs,
) -> AsyncGenerator[MindPalace, None]:
    """Started MindPalace for the duration of the block."""
    palace = MindPalace(settings, **kwargs)
    await palace.start()
    try:
        yield palace
    finally:
        await palace.close()
