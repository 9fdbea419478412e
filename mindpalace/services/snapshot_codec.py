"""Snapshot Codec - whole-state export, import and reset with forced persistence.

Invariants:
    - import_snapshot() returns False without touching any collection when the text
      does not parse; otherwise every recognized key present replaces its collection
    - Import and reset return only after every replaced collection is durable
      (persist_now awaited), or report False if a forced write failed
    - Import and reset wait for the startup load, so they never race the load gate
    - A document with no recognized key is a successful no-op unless strict_shape is set

Design Decisions:
    - Forced writes go through the same partition writer as write-through, behind any
      pending write, so an older queued write can never land after them
    - The in-memory replacement is kept when a forced write fails; the failure is
      logged and reported as False
"""

import inspect
import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from mindpalace.core.collection_store import CollectionStore
from mindpalace.core.domain_types import ChangeOrigin, CollectionKind
from mindpalace.core.errors import MindPalaceError, SnapshotParseError, SnapshotShapeError
from mindpalace.core.repository_protocols import ConfirmPrompt, FileReader, FileSaver
from mindpalace.core.seed_data import default_shelves
from mindpalace.core.snapshot import build_snapshot, parse_snapshot, snapshot_filename
from mindpalace.services.sync_controller import SyncController

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotCodec:
    """Export/import/reset over a CollectionStore and its SyncController."""

    def __init__(
        self,
        store: CollectionStore,
        sync: SyncController,
        saver: FileSaver | None = None,
        backup_prefix: str = "mind_palace_backup",
        strict_shape: bool = False,
        clock: Callable[[], datetime] | None = None,
    ):
        self._store = store
        self._sync = sync
        self._saver = saver
        self._backup_prefix = backup_prefix
        self._strict_shape = strict_shape
        self._clock = clock or _utc_now

    def snapshot(self, now: datetime | None = None) -> dict:
        """Current state of both collections as a snapshot document."""
        return build_snapshot(
            {kind: self._store.get(kind) for kind in CollectionKind},
            now or self._clock(),
        )

    async def export_snapshot(self, saver: FileSaver | None = None) -> None:
        """Hand the pretty-printed snapshot to the file-save collaborator."""
        target = saver or self._saver
        if target is None:
            raise RuntimeError("No file saver configured for export")
        now = self._clock()
        doc = self.snapshot(now)
        payload = json.dumps(doc, indent=2, ensure_ascii=False)
        await target.save(snapshot_filename(now, self._backup_prefix), payload)
        logger.info(
            "Exported snapshot",
            extra={"shelf_count": sum(len(doc[k.value]) for k in CollectionKind)},
        )

    async def import_snapshot(self, raw_text: str) -> bool:
        """Replace the collections named in raw_text and persist them."""
        await self._sync.wait_until_loaded()
        try:
            parsed = parse_snapshot(raw_text)
        except SnapshotParseError as e:
            logger.warning(
                f"Invalid backup file: {e.message}", extra=e.log_extra(),
            )
            return False

        if not parsed:
            error = SnapshotShapeError([kind.value for kind in CollectionKind])
            logger.warning(error.message, extra=error.log_extra())
            return not self._strict_shape

        for kind, shelves in parsed.items():
            self._store.replace(kind, shelves, ChangeOrigin.FORCED)
        return await self._persist(list(parsed), "import")

    async def import_from(self, reader: FileReader) -> bool:
        """Read a snapshot through the file-read collaborator, then import it."""
        try:
            raw_text = await reader.read_text()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read backup file: {e}")
            return False
        return await self.import_snapshot(raw_text)

    async def reset_to_defaults(self, confirm: ConfirmPrompt | None = None) -> bool:
        """Restore the built-in shelves in both collections once confirmed."""
        if confirm is not None:
            answer = confirm()
            if inspect.isawaitable(answer):
                answer = await answer
            if not answer:
                return False
        await self._sync.wait_until_loaded()
        for kind in CollectionKind:
            self._store.replace(kind, default_shelves(kind), ChangeOrigin.FORCED)
        return await self._persist(list(CollectionKind), "reset")

    async def _persist(self, kinds: list[CollectionKind], operation: str) -> bool:
        for kind in kinds:
            try:
                await self._sync.persist_now(kind)
            except MindPalaceError as e:
                logger.error(
                    f"Forced {operation} write failed for {kind.value}: {e.message}",
                    extra={"collection": kind.value, "error_code": "PERSIST_FAILURE"},
                )
                return False
        logger.info(f"{operation.capitalize()} persisted: {', '.join(k.value for k in kinds)}")
        return True
