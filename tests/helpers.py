"""Shared builders for shelf fixtures."""

from mindpalace.schemas.shelves import MediaItem, MediaShelf


def media_shelf(shelf_id: int, *item_ids: int, title: str | None = None) -> MediaShelf:
    """Media shelf with one placeholder album per item id."""
    return MediaShelf(
        id=shelf_id,
        title=title or f"Shelf {shelf_id}",
        items=[MediaItem(id=i, title=f"item{i}") for i in item_ids],
    )


def layout(shelves) -> dict[int, list[int]]:
    """shelf id -> item ids, in order."""
    return {shelf.id: [item.id for item in shelf.items] for shelf in shelves}


def media_record(shelf_id: int, *item_ids: int, title: str | None = None) -> dict:
    """Wire-format media shelf record, as stored durably."""
    return media_shelf(shelf_id, *item_ids, title=title).to_record()
