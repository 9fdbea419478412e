"""Collection Routes - read and mutate the shelves of either collection.

Invariants:
    - {kind} is a CollectionKind value ("cafe" or "audio")
    - Every mutation goes through CollectionStore, so write-through applies
    - Item bodies accept wire names (coverUrl) or attribute names (cover_url)
    - The item id in the path wins over any id in a PUT body
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status

from mindpalace.api.dependencies import get_palace
from mindpalace.core.domain_types import CollectionKind
from mindpalace.core.snapshot import dump_shelves
from mindpalace.schemas.shelves import ShelfCreate, ShelfRename
from mindpalace.services.palace import MindPalace

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/collections", tags=["collections"])


@router.get("/{kind}")
async def get_collection(kind: CollectionKind, palace: MindPalace = Depends(get_palace)):
    return {
        "kind": kind.value,
        "is_loading": palace.is_loading,
        "shelves": dump_shelves(palace.store.get(kind)),
    }


@router.post("/{kind}/shelves", status_code=status.HTTP_201_CREATED)
async def add_shelf(
    kind: CollectionKind, body: ShelfCreate,
    palace: MindPalace = Depends(get_palace),
):
    shelf = palace.store.add_shelf(kind, body.title)
    return shelf.to_record()


@router.patch("/{kind}/shelves/{shelf_id}")
async def rename_shelf(
    kind: CollectionKind, shelf_id: int, body: ShelfRename,
    palace: MindPalace = Depends(get_palace),
):
    shelf = palace.store.rename_shelf(kind, shelf_id, body.title)
    return shelf.to_record()


@router.delete("/{kind}/shelves/{shelf_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shelf(
    kind: CollectionKind, shelf_id: int, palace: MindPalace = Depends(get_palace),
):
    palace.store.delete_shelf(kind, shelf_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{kind}/shelves/{shelf_id}/items", status_code=status.HTTP_201_CREATED)
async def add_item(
    kind: CollectionKind,
    shelf_id: int,
    body: dict[str, Any] | None = Body(None),
    index: int | None = Query(None, ge=0),
    palace: MindPalace = Depends(get_palace),
):
    item = palace.store.add_item(kind, shelf_id, body or {}, index=index)
    return item.to_record()


@router.put("/{kind}/shelves/{shelf_id}/items/{item_id}")
async def edit_item(
    kind: CollectionKind,
    shelf_id: int,
    item_id: int,
    body: dict[str, Any] = Body(...),
    palace: MindPalace = Depends(get_palace),
):
    item = palace.store.edit_item(kind, shelf_id, {**body, "id": item_id})
    return item.to_record()


@router.delete(
    "/{kind}/shelves/{shelf_id}/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_item(
    kind: CollectionKind, shelf_id: int, item_id: int,
    palace: MindPalace = Depends(get_palace),
):
    palace.store.delete_item(kind, shelf_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
