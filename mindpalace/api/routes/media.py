"""Media Routes - favorites and drag-and-drop reordering of albums.

Invariants:
    - A move naming an unknown shelf returns the unchanged collection (200, not 404)
"""

from fastapi import APIRouter, Depends

from mindpalace.api.dependencies import get_palace
from mindpalace.core.snapshot import dump_shelves
from mindpalace.schemas.shelves import MoveRequest
from mindpalace.services.palace import MindPalace

router = APIRouter(prefix="/api/v1/media", tags=["media"])


@router.get("/favorites")
async def list_favorites(palace: MindPalace = Depends(get_palace)):
    return {
        "items": [
            {"shelf_id": shelf_id, **item.to_record()}
            for shelf_id, item in palace.store.favorites()
        ],
    }


@router.post("/shelves/{shelf_id}/items/{item_id}/favorite")
async def toggle_favorite(
    shelf_id: int, item_id: int, palace: MindPalace = Depends(get_palace),
):
    return palace.store.toggle_favorite(shelf_id, item_id).to_record()


@router.post("/move")
async def move_item(body: MoveRequest, palace: MindPalace = Depends(get_palace)):
    shelves = palace.move(
        body.source_shelf_id, body.source_index,
        body.target_shelf_id, body.target_index,
    )
    return {"shelves": dump_shelves(shelves)}
