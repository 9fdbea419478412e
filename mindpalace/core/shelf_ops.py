"""Shelf Operations - pure copy-on-write transitions over one collection.

Invariants:
    - Input sequences and the shelves/items inside them are never mutated
    - Every successful operation returns a new list of deep-copied shelves
    - Unknown shelf/item ids raise before anything is copied
    - Item order inside a shelf only changes by explicit insert/remove

Design Decisions:
    - Clone-then-mutate over structural sharing: holders of a previous collection value
      can keep reading it while the store publishes the new one
    - Signatures take the collection first so functools.partial(op, ...) yields a
      replayable single-argument operation for the collection store
"""

from collections.abc import Sequence

from mindpalace.core.domain_types import ItemId, ShelfId
from mindpalace.core.errors import ItemNotFoundError, ShelfNotFoundError


def clone_shelves(shelves: Sequence) -> list:
    """Deep copy of a whole collection."""
    return [shelf.model_copy(deep=True) for shelf in shelves]


def find_shelf(shelves: Sequence, shelf_id: ShelfId):
    """Shelf with this id, or None."""
    return next((s for s in shelves if s.id == shelf_id), None)


def _require_shelf(shelves: Sequence, shelf_id: ShelfId):
    shelf = find_shelf(shelves, shelf_id)
    if shelf is None:
        raise ShelfNotFoundError(shelf_id)
    return shelf


def _item_position(shelf, item_id: ItemId) -> int:
    for i, item in enumerate(shelf.items):
        if item.id == item_id:
            return i
    raise ItemNotFoundError(shelf.id, item_id)


def shelf_ids(shelves: Sequence) -> set[int]:
    return {s.id for s in shelves}


def item_ids(shelves: Sequence) -> set[int]:
    """Every item id across the collection (item id space is collection-wide)."""
    return {item.id for shelf in shelves for item in shelf.items}


def count_items(shelves: Sequence) -> int:
    return sum(len(s.items) for s in shelves)


# --- Shelf transitions --------------------------------------------------------

def append_shelf(shelves: Sequence, shelf) -> list:
    """New collection with shelf added at the end."""
    return clone_shelves(shelves) + [shelf.model_copy(deep=True)]


def rename_shelf(shelves: Sequence, shelf_id: ShelfId, title: str) -> list:
    _require_shelf(shelves, shelf_id)
    result = clone_shelves(shelves)
    find_shelf(result, shelf_id).title = title
    return result


def remove_shelf(shelves: Sequence, shelf_id: ShelfId) -> list:
    _require_shelf(shelves, shelf_id)
    return [s for s in clone_shelves(shelves) if s.id != shelf_id]


# --- Item transitions ---------------------------------------------------------

def insert_item(shelves: Sequence, shelf_id: ShelfId, item, index: int | None = None) -> list:
    """Append item to the shelf, or insert it at index."""
    _require_shelf(shelves, shelf_id)
    result = clone_shelves(shelves)
    items = find_shelf(result, shelf_id).items
    if index is None:
        items.append(item.model_copy(deep=True))
    else:
        items.insert(index, item.model_copy(deep=True))
    return result


def replace_item(shelves: Sequence, shelf_id: ShelfId, item) -> list:
    """Full-record replace; the item keeps its position on the shelf."""
    _item_position(_require_shelf(shelves, shelf_id), item.id)
    result = clone_shelves(shelves)
    target = find_shelf(result, shelf_id)
    target.items[_item_position(target, item.id)] = item.model_copy(deep=True)
    return result


def remove_item(shelves: Sequence, shelf_id: ShelfId, item_id: ItemId) -> list:
    _item_position(_require_shelf(shelves, shelf_id), item_id)
    result = clone_shelves(shelves)
    target = find_shelf(result, shelf_id)
    del target.items[_item_position(target, item_id)]
    return result


def toggle_favorite(shelves: Sequence, shelf_id: ShelfId, item_id: ItemId) -> list:
    """Flip is_favorite on a media item (absent counts as False)."""
    _item_position(_require_shelf(shelves, shelf_id), item_id)
    result = clone_shelves(shelves)
    target = find_shelf(result, shelf_id)
    item = target.items[_item_position(target, item_id)]
    item.is_favorite = not item.is_favorite
    return result
