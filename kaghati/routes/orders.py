"""
Order routes: Shopify orders, order edits and per-store splits.
"""

import logging
from typing import Any, Dict, List, Optional, Set

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from ..db import OrderSplit, SplitStatus
from ..dependencies import (
    allowed_store_codes,
    ensure_store_access,
    get_db,
    get_shopify_client,
    require_auth,
)
from ..processor import (
    cancel_order,
    cancel_split,
    create_split,
    edit_order,
    get_order,
    list_orders,
    transition_split,
    OrderEditError,
    OrderEditRequest,
)
from ..shopify import ShopifyClient, from_gid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", dependencies=[Depends(require_auth)])


class CancelRequest(BaseModel):
    reason: str = "CUSTOMER"
    restock: bool = True
    refund: bool = False
    notify_customer: bool = False
    staff_note: str = "Order cancelled via API"


class SplitCreate(BaseModel):
    order_number: int
    outlet_id: str
    store_code: str
    line_items: List[Dict[str, Any]] = Field(default_factory=list)


class SplitStatusChange(BaseModel):
    status: SplitStatus
    comment: Optional[str] = None

    @field_validator("status")
    @classmethod
    def not_new(cls, value: SplitStatus) -> SplitStatus:
        if value == SplitStatus.NEW:
            raise ValueError("new is not a status a split can move to")
        return value


@router.get("")
async def orders(
    first: int = Query(25, ge=1, le=250),
    after: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    client: ShopifyClient = Depends(get_shopify_client),
):
    return await list_orders(client, first=first, after=after, query=query)


@router.post("/splits/{split_record_id}/status", response_model=OrderSplit)
async def change_split_status(
    split_record_id: str,
    change: SplitStatusChange,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
    client: ShopifyClient = Depends(get_shopify_client),
):
    """Move a split to a new status. Cancelling also cancels the Shopify order."""
    db = get_db()
    split = await db.get_order_split(split_record_id)
    if split is None:
        raise HTTPException(status_code=404, detail="Order split not found")
    ensure_store_access(allowed, split.store_code)

    try:
        if change.status == SplitStatus.CANCEL:
            return await cancel_split(client, db, split_record_id, change.comment)
        return await transition_split(db, split_record_id, change.status, change.comment)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{order_id}")
async def order_detail(order_id: str, client: ShopifyClient = Depends(get_shopify_client)):
    order = await get_order(client, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/{order_id}/edit")
async def edit(
    order_id: str,
    request: OrderEditRequest,
    client: ShopifyClient = Depends(get_shopify_client),
):
    """Remove, add and re-quantify line items, then commit the edit."""
    try:
        result = await edit_order(client, get_db(), order_id, request)
    except OrderEditError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {**result.model_dump(), "errors": result.errors}


@router.post("/{order_id}/cancel")
async def cancel(
    order_id: str,
    request: CancelRequest,
    client: ShopifyClient = Depends(get_shopify_client),
):
    try:
        return await cancel_order(client, order_id, **request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{order_id}/splits", response_model=List[OrderSplit])
async def order_splits(order_id: str, allowed: Optional[Set[str]] = Depends(allowed_store_codes)):
    splits = await get_db().get_order_splits(from_gid(order_id))
    return [s for s in splits if allowed is None or s.store_code in allowed]


@router.post("/{order_id}/splits", response_model=OrderSplit, status_code=201)
async def add_split(
    order_id: str,
    data: SplitCreate,
    allowed: Optional[Set[str]] = Depends(allowed_store_codes),
):
    """Assign part of an order to a store."""
    ensure_store_access(allowed, data.store_code)
    db = get_db()
    store = await db.get_store_by_code(data.store_code)
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")

    return await create_split(
        db,
        order_reference_id=order_id,
        order_number=data.order_number,
        outlet_id=data.outlet_id,
        store_code=store.store_code,
        store_name=store.store_name,
        erp_store_id=store.erp_store_id,
        line_items=data.line_items,
    )
