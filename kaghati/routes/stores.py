"""
Store management routes.
"""

import logging
from typing import Any, Dict, List, Optional, Set

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..config import settings
from ..db import Store, StoreCreate, StoreUpdate, RecordStatus
from ..dependencies import allowed_store_codes, ensure_store_access, get_db, require_auth
from ..processor import (
    adjust_radius,
    add_time_slot,
    remove_time_slot,
    set_day_open,
    stores_covering,
    update_time_slot,
    validate_local_delivery,
)
from ..processor import stores as store_ops

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stores", dependencies=[Depends(require_auth)])


class RadiusChange(BaseModel):
    ring: str  # "R1".."R5"
    value: int


class TimeSlot(BaseModel):
    start: str  # HH:MM
    end: str


async def _get_store_or_404(store_id: str, allowed: Optional[Set[str]]) -> Store:
    store = await get_db().get_store(store_id)
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    ensure_store_access(allowed, store.store_code)
    return store


@router.get("", response_model=List[Store])
async def list_stores(
    status: Optional[RecordStatus] = Query(None),
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    stores = await get_db().get_stores(status)
    return [store for store in stores if allowed is None or store.store_code in allowed]


@router.get("/coverage")
async def coverage(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    """Active stores whose delivery rings cover a point, nearest first."""
    stores = await get_db().get_stores(RecordStatus.ACTIVE)
    return [
        {
            "store_id": store.id,
            "store_code": store.store_code,
            "store_name": store.store_name,
            "ring": ring,
            "distance_km": round(distance, 3),
        }
        for store, ring, distance in stores_covering(stores, lat, lng)
        if allowed is None or store.store_code in allowed
    ]


@router.post("", response_model=Store, status_code=201)
async def create_store(data: StoreCreate, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    ensure_store_access(allowed, data.store_code)
    try:
        return await store_ops.create_store(get_db(), data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{store_id}", response_model=Store)
async def get_store(store_id: str, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    return await _get_store_or_404(store_id, allowed)


@router.put("/{store_id}", response_model=Store)
async def update_store(
    store_id: str,
    data: StoreUpdate,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    await _get_store_or_404(store_id, allowed)
    if data.store_code:
        ensure_store_access(allowed, data.store_code)
    try:
        store = await store_ops.update_store(get_db(), store_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


@router.delete("/{store_id}")
async def delete_store(store_id: str, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    """Delete a store and its pincodes."""
    await _get_store_or_404(store_id, allowed)
    if not await get_db().delete_store(store_id):
        raise HTTPException(status_code=404, detail="Store not found")
    return {"success": True}


@router.post("/{store_id}/radius", response_model=Store)
async def change_radius(
    store_id: str,
    change: RadiusChange,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    """Set one delivery ring, pushing out the rings after it."""
    store = await _get_store_or_404(store_id, allowed)
    rings = store.radius or dict(settings.default_radius_km)

    try:
        radius = adjust_radius(rings, change.ring, change.value, settings.default_radius_km)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Store {store.store_code} rings {rings} -> {radius}")
    return await get_db().update_store(store_id, radius=radius)


@router.put("/{store_id}/hours", response_model=Store)
async def replace_hours(
    store_id: str,
    hours: Dict[str, Any],
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    await _get_store_or_404(store_id, allowed)
    try:
        local_delivery = validate_local_delivery(hours)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await get_db().update_store(store_id, local_delivery=local_delivery)


@router.post("/{store_id}/hours/{day}/slots", response_model=Store)
async def add_slot(
    store_id: str,
    day: str,
    slot: TimeSlot,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    store = await _get_store_or_404(store_id, allowed)
    try:
        local_delivery = add_time_slot(store.local_delivery, day, slot.start, slot.end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await get_db().update_store(store_id, local_delivery=local_delivery)


@router.put("/{store_id}/hours/{day}/slots/{index}", response_model=Store)
async def update_slot(
    store_id: str,
    day: str,
    index: int,
    slot: TimeSlot,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    store = await _get_store_or_404(store_id, allowed)
    try:
        local_delivery = update_time_slot(store.local_delivery, day, index, slot.start, slot.end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await get_db().update_store(store_id, local_delivery=local_delivery)


@router.delete("/{store_id}/hours/{day}/slots/{index}", response_model=Store)
async def remove_slot(
    store_id: str,
    day: str,
    index: int,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    store = await _get_store_or_404(store_id, allowed)
    try:
        local_delivery = remove_time_slot(store.local_delivery, day, index)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await get_db().update_store(store_id, local_delivery=local_delivery)


@router.put("/{store_id}/hours/{day}/open", response_model=Store)
async def set_open(
    store_id: str,
    day: str,
    is_open: bool = Query(...),
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    store = await _get_store_or_404(store_id, allowed)
    try:
        local_delivery = set_day_open(store.local_delivery, day, is_open)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await get_db().update_store(store_id, local_delivery=local_delivery)
