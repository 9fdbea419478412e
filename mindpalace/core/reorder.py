"""Reorder Engine - move one item between shelves of a collection.

Invariants:
    - The input collection is never mutated; the result shares no objects with it
    - Unknown source or target shelf: the input object itself is returned
    - Total item count is identical before and after every call
    - A negative or out-of-range source index removes nothing and inserts nothing

Design Decisions:
    - target_index None appends; other indexes follow list.insert (past the end appends)
    - No special case for source == target: dropping an item on its own slot is skipped
      by the caller, and the clone-and-splice still yields an equivalent collection
"""

from collections.abc import Sequence

from mindpalace.core.domain_types import ShelfId
from mindpalace.core.shelf_ops import clone_shelves, find_shelf


def move_item(
    shelves: Sequence,
    source_shelf_id: ShelfId,
    source_index: int,
    target_shelf_id: ShelfId,
    target_index: int | None = None,
):
    """Clone the collection, splice one item out of the source shelf and into the target."""
    result = clone_shelves(shelves)
    source = find_shelf(result, source_shelf_id)
    target = find_shelf(result, target_shelf_id)
    if source is None or target is None:
        return shelves

    if not 0 <= source_index < len(source.items):
        return result
    moved = source.items.pop(source_index)

    if target_index is None:
        target.items.append(moved)
    else:
        target.items.insert(target_index, moved)
    return result
