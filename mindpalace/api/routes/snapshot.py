"""Snapshot Routes - backup download, restore upload and reset to defaults.

Invariants:
    - Export responds with the exact payload handed to the file-save collaborator
    - Import returns 200 only after the imported collections are durable
    - Reset without confirm=true changes nothing
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from mindpalace.api.dependencies import get_palace
from mindpalace.infrastructure.file_transfer import MemoryFileSaver
from mindpalace.schemas.shelves import ResetRequest
from mindpalace.services.palace import MindPalace

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/snapshot", tags=["snapshot"])


@router.get("/export")
async def export_snapshot(palace: MindPalace = Depends(get_palace)):
    saver = MemoryFileSaver()
    await palace.export_snapshot(saver)
    filename, payload = saver.last
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_snapshot(request: Request, palace: MindPalace = Depends(get_palace)):
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = None
    if text is None or not await palace.import_snapshot(text):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "imported": False,
                "error": {
                    "code": "IMPORT_FAILED",
                    "message": "Backup file could not be imported",
                },
            },
        )
    return {"imported": True}


@router.post("/reset")
async def reset_to_defaults(body: ResetRequest, palace: MindPalace = Depends(get_palace)):
    reset = await palace.reset_to_defaults(lambda: body.confirm)
    return {"reset": reset}
