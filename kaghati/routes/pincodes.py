"""
Pincode management routes.
"""

from typing import List, Optional, Set

from fastapi import APIRouter, Depends, HTTPException, Query

from ..db import Pincode, PincodeCreate, PincodeUpdate, Store
from ..dependencies import allowed_store_codes, ensure_store_access, get_db, require_auth
from ..processor import stores as store_ops

router = APIRouter(prefix="/api/pincodes", dependencies=[Depends(require_auth)])


async def _get_pincode_or_404(pincode_id: str, allowed: Optional[Set[str]]) -> Pincode:
    pincode = await get_db().get_pincode(pincode_id)
    if not pincode:
        raise HTTPException(status_code=404, detail="Pincode not found")
    ensure_store_access(allowed, pincode.store_code)
    return pincode


async def _check_target_store(store_id: str, allowed: Optional[Set[str]]) -> None:
    store = await get_db().get_store(store_id)
    if store is None:
        raise HTTPException(status_code=404, detail="Store not found")
    ensure_store_access(allowed, store.store_code)


@router.get("", response_model=List[Pincode])
async def list_pincodes(
    store_id: Optional[str] = Query(None),
    pin_code: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    pincodes = await get_db().get_pincodes(
        store_id=store_id, pin_code=pin_code, limit=limit, offset=(page - 1) * limit
    )
    return [p for p in pincodes if allowed is None or p.store_code in allowed]


@router.get("/lookup/{pin_code}", response_model=List[Store])
async def lookup(pin_code: str, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    """Stores that deliver to a pincode."""
    try:
        pin_code = store_ops.validate_pin_code(pin_code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    stores = await get_db().get_stores_for_pincode(pin_code)
    return [store for store in stores if allowed is None or store.store_code in allowed]


@router.post("", response_model=Pincode, status_code=201)
async def create_pincode(data: PincodeCreate, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    await _check_target_store(data.store_id, allowed)
    try:
        return await store_ops.create_pincode(get_db(), data)
    except LookupError:
        raise HTTPException(status_code=404, detail="Store not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{pincode_id}", response_model=Pincode)
async def get_pincode(pincode_id: str, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    return await _get_pincode_or_404(pincode_id, allowed)


@router.put("/{pincode_id}", response_model=Pincode)
async def update_pincode(
    pincode_id: str,
    data: PincodeUpdate,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    await _get_pincode_or_404(pincode_id, allowed)
    if data.store_id:
        await _check_target_store(data.store_id, allowed)
    try:
        pincode = await store_ops.update_pincode(get_db(), pincode_id, data)
    except LookupError:
        raise HTTPException(status_code=404, detail="Store not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not pincode:
        raise HTTPException(status_code=404, detail="Pincode not found")
    return pincode


@router.delete("/{pincode_id}")
async def delete_pincode(pincode_id: str, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    await _get_pincode_or_404(pincode_id, allowed)
    if not await get_db().delete_pincode(pincode_id):
        raise HTTPException(status_code=404, detail="Pincode not found")
    return {"success": True}
