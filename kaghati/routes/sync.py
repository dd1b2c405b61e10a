"""
Sync trigger and status routes.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..config import settings
from ..dependencies import get_db, require_auth
from ..processor import banner_visible, dismiss, run_sync_safely, start_sync, status_message, SyncError

router = APIRouter(prefix="/api/sync", dependencies=[Depends(require_auth)])


class SyncResponse(BaseModel):
    message: str
    sync_id: Optional[str] = None
    success: bool


@router.post("", response_model=SyncResponse, status_code=202)
async def trigger_sync():
    """Start a product and profile sync in the background."""
    db = get_db()

    try:
        status = await start_sync(db)
    except SyncError as e:
        raise HTTPException(status_code=409, detail=str(e))

    asyncio.create_task(run_sync_safely(db, status))

    return SyncResponse(message="Sync started", sync_id=status.id, success=True)


@router.get("/status")
async def get_sync_status():
    """Latest sync run, with the interval to poll at while it is running."""
    status = await get_db().get_latest_sync_status()

    return {
        "status": status.model_dump(mode="json") if status else None,
        "message": status_message(status),
        "show_banner": banner_visible(status),
        "poll_after_seconds": (
            settings.sync_poll_interval_seconds if status and status.is_syncing else None
        ),
    }


@router.post("/dismiss")
async def dismiss_banner():
    status = await dismiss(get_db())
    if status is None:
        raise HTTPException(status_code=404, detail="No sync has run yet")
    return {"success": True}
