"""
Customer routes, passed through to Shopify.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..dependencies import get_shopify_client, require_auth
from ..processor import catalog
from ..shopify import ShopifyClient

router = APIRouter(prefix="/api/customers", dependencies=[Depends(require_auth)])


@router.get("")
async def list_customers(
    first: int = Query(25, ge=1, le=250),
    after: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    client: ShopifyClient = Depends(get_shopify_client),
):
    return await catalog.list_customers(client, first=first, after=after, query=query)


@router.post("", status_code=201)
async def create_customer(
    customer: Dict[str, Any] = Body(...),
    client: ShopifyClient = Depends(get_shopify_client),
):
    return await catalog.create_customer(client, customer)


@router.get("/{customer_id}")
async def get_customer(customer_id: str, client: ShopifyClient = Depends(get_shopify_client)):
    customer = await catalog.get_customer(client, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str,
    customer: Dict[str, Any] = Body(...),
    client: ShopifyClient = Depends(get_shopify_client),
):
    return await catalog.update_customer(client, customer_id, customer)
