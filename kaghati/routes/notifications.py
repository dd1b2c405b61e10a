"""
Notification routes: order event polling and operator logs.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..db import LogType, Notification, NotificationLog
from ..dependencies import get_db, require_auth
from ..processor import acknowledge, mark_reviewed, pending_events

router = APIRouter(prefix="/api/notifications", dependencies=[Depends(require_auth)])


class AckRequest(BaseModel):
    ids: List[str]


@router.get("", response_model=List[Notification])
async def pending(
    store_code: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
):
    """Order events not yet acknowledged, oldest first."""
    return await pending_events(get_db(), store_code=store_code, limit=limit)


@router.post("/ack")
async def ack(request: AckRequest):
    count = await acknowledge(get_db(), request.ids)
    return {"acknowledged": count}


@router.get("/logs", response_model=List[NotificationLog])
async def logs(
    log_type: Optional[LogType] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=200),
):
    return await get_db().get_notification_logs(
        log_type=log_type, limit=limit, offset=(page - 1) * limit
    )


@router.post("/logs/{log_id}/viewed")
async def viewed(log_id: str):
    if not await mark_reviewed(get_db(), log_id):
        raise HTTPException(status_code=404, detail="Notification log not found")
    return {"success": True}
