"""Collection Store - authoritative in-memory state for both collections.

Invariants:
    - Starts with the built-in seed for both collections and is_loading = True
    - Every state transition publishes a new tuple; previously published tuples never change
    - A failed mutation raises before anything is published
    - Mutations made while loading are recorded and replayed on top of the load result,
      so a late-arriving load never discards them
    - finish_loading() republishes every collection mutated while loading as a MUTATION

Design Decisions:
    - Explicitly constructed object, not a module-level singleton: tests build as many
      independent stores as they need
    - Synchronous and IO-free: the sync controller subscribes and owns all awaiting
    - Operations are functools.partial objects over core/shelf_ops.py so that
      the exact same transition (same generated ids) can be replayed after a load
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from functools import partial

from pydantic import ValidationError

from mindpalace.core import shelf_ops
from mindpalace.core.domain_types import ChangeOrigin, CollectionKind, ItemId, ShelfId
from mindpalace.core.errors import MindPalaceError, RecordValidationError
from mindpalace.core.id_source import IdSource
from mindpalace.core.reorder import move_item
from mindpalace.core.seed_data import default_shelves, new_item_template, new_shelf_title
from mindpalace.schemas.shelves import MediaItem, item_model_for, shelf_model_for

logger = logging.getLogger(__name__)

Listener = Callable[[CollectionKind, tuple, ChangeOrigin], None]
Operation = Callable[[Sequence], Sequence]


def _to_wire(model: type, fields: Mapping) -> dict:
    """Rename attribute-style keys (cover_url) to their wire alias (coverUrl)."""
    aliases = {name: info.alias or name for name, info in model.model_fields.items()}
    return {aliases.get(key, key): value for key, value in fields.items()}


class CollectionStore:
    """In-memory shelves for the ingredient and media collections."""

    def __init__(self, id_source: IdSource | None = None):
        self._collections: dict[CollectionKind, tuple] = {
            kind: default_shelves(kind) for kind in CollectionKind
        }
        self._is_loading = True
        self._deferred: dict[CollectionKind, list[Operation]] = {
            kind: [] for kind in CollectionKind
        }
        self._listeners: list[Listener] = []
        self._ids = id_source or IdSource()

    # --- Read access ----------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def get(self, kind: CollectionKind) -> tuple:
        """Current collection value. Treat as read-only."""
        return self._collections[kind]

    @property
    def ingredient_shelves(self) -> tuple:
        return self._collections[CollectionKind.INGREDIENT]

    @property
    def media_shelves(self) -> tuple:
        return self._collections[CollectionKind.MEDIA]

    def item_count(self, kind: CollectionKind) -> int:
        return shelf_ops.count_items(self._collections[kind])

    def favorites(self) -> list[tuple[int, MediaItem]]:
        """(shelf id, item) for every favorite album, in shelf order."""
        return [
            (shelf.id, item)
            for shelf in self._collections[CollectionKind.MEDIA]
            for item in shelf.items
            if item.is_favorite
        ]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # --- Transitions ----------------------------------------------------------

    def _publish(self, kind: CollectionKind, value: tuple, origin: ChangeOrigin) -> None:
        for listener in list(self._listeners):
            listener(kind, value, origin)

    def _apply(
        self, kind: CollectionKind, op: Operation,
        origin: ChangeOrigin = ChangeOrigin.MUTATION,
    ) -> tuple:
        current = self._collections[kind]
        result = op(current)
        if result is current:
            return current
        value = tuple(result)
        self._collections[kind] = value
        if self._is_loading and origin is ChangeOrigin.MUTATION:
            self._deferred[kind].append(op)
        self._publish(kind, value, origin)
        return value

    def load(self, kind: CollectionKind, shelves: Sequence) -> None:
        """Install a startup load result, replaying mutations recorded while loading."""
        if not self._is_loading:
            raise RuntimeError("load() is only valid while the store is loading")
        value = tuple(shelves)
        replayed: list[Operation] = []
        for op in self._deferred[kind]:
            try:
                value = tuple(op(value))
            except MindPalaceError as e:
                logger.warning(
                    f"Dropped mutation made during load: {e.message}",
                    extra=e.log_extra(collection=kind.value),
                )
                continue
            replayed.append(op)
        self._deferred[kind] = replayed
        self._collections[kind] = value
        self._publish(kind, value, ChangeOrigin.LOAD)

    def finish_loading(self) -> None:
        """Leave the loading state; collections mutated meanwhile are republished."""
        if not self._is_loading:
            return
        self._is_loading = False
        pending = [kind for kind in CollectionKind if self._deferred[kind]]
        self._deferred = {kind: [] for kind in CollectionKind}
        for kind in pending:
            self._publish(kind, self._collections[kind], ChangeOrigin.MUTATION)

    def replace(
        self, kind: CollectionKind, shelves: Sequence,
        origin: ChangeOrigin = ChangeOrigin.FORCED,
    ) -> tuple:
        """Wholesale replacement (import/reset)."""
        return self._apply(kind, lambda _: shelf_ops.clone_shelves(shelves), origin)

    # --- Shelf mutations ------------------------------------------------------

    def add_shelf(self, kind: CollectionKind, title: str | None = None):
        current = self._collections[kind]
        shelf = shelf_model_for(kind)(
            id=self._ids.next_id(shelf_ops.shelf_ids(current)),
            title=title or new_shelf_title(kind),
            items=[],
        )
        self._apply(kind, partial(shelf_ops.append_shelf, shelf=shelf))
        return shelf.model_copy(deep=True)

    def rename_shelf(self, kind: CollectionKind, shelf_id: ShelfId, title: str):
        value = self._apply(
            kind, partial(shelf_ops.rename_shelf, shelf_id=shelf_id, title=title),
        )
        return shelf_ops.find_shelf(value, shelf_id).model_copy(deep=True)

    def delete_shelf(self, kind: CollectionKind, shelf_id: ShelfId) -> None:
        self._apply(kind, partial(shelf_ops.remove_shelf, shelf_id=shelf_id))

    # --- Item mutations -------------------------------------------------------

    def _validate_item(self, kind: CollectionKind, data: dict):
        try:
            return item_model_for(kind).model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(loc) for loc in first["loc"])
            raise RecordValidationError(f"{field}: {first['msg']}", field=field) from e

    def add_item(
        self, kind: CollectionKind, shelf_id: ShelfId,
        fields: Mapping | None = None, index: int | None = None,
    ):
        """Add an item built from the collection template plus fields; id is assigned here."""
        current = self._collections[kind]
        model = item_model_for(kind)
        data = {**new_item_template(kind), **_to_wire(model, fields or {})}
        data["id"] = self._ids.next_id(shelf_ops.item_ids(current))
        item = self._validate_item(kind, data)
        self._apply(
            kind,
            partial(shelf_ops.insert_item, shelf_id=shelf_id, item=item, index=index),
        )
        return item.model_copy(deep=True)

    def edit_item(self, kind: CollectionKind, shelf_id: ShelfId, item):
        """Full-record replace of the item with the same id on this shelf."""
        model = item_model_for(kind)
        data = item.to_record() if isinstance(item, model) else _to_wire(model, item)
        record = self._validate_item(kind, data)
        self._apply(kind, partial(shelf_ops.replace_item, shelf_id=shelf_id, item=record))
        return record.model_copy(deep=True)

    def delete_item(self, kind: CollectionKind, shelf_id: ShelfId, item_id: ItemId) -> None:
        self._apply(
            kind, partial(shelf_ops.remove_item, shelf_id=shelf_id, item_id=item_id),
        )

    def toggle_favorite(self, shelf_id: ShelfId, item_id: ItemId) -> MediaItem:
        value = self._apply(
            CollectionKind.MEDIA,
            partial(shelf_ops.toggle_favorite, shelf_id=shelf_id, item_id=item_id),
        )
        shelf = shelf_ops.find_shelf(value, shelf_id)
        item = next(item for item in shelf.items if item.id == item_id)
        return item.model_copy(deep=True)

    def move(
        self,
        source_shelf_id: ShelfId,
        source_index: int,
        target_shelf_id: ShelfId,
        target_index: int | None = None,
        kind: CollectionKind = CollectionKind.MEDIA,
    ) -> tuple:
        """Move one item between shelves; unknown shelves leave the collection as is."""
        return self._apply(
            kind,
            partial(
                move_item,
                source_shelf_id=source_shelf_id,
                source_index=source_index,
                target_shelf_id=target_shelf_id,
                target_index=target_index,
            ),
        )
