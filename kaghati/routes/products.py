"""
Product and variant routes, passed through to Shopify.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..db import ProductRecord
from ..dependencies import get_db, get_shopify_client, require_auth
from ..processor import catalog
from ..shopify import ShopifyClient

router = APIRouter(prefix="/api/products", dependencies=[Depends(require_auth)])


@router.get("")
async def list_products(
    first: int = Query(25, ge=1, le=250),
    after: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    client: ShopifyClient = Depends(get_shopify_client),
):
    return await catalog.list_products(client, first=first, after=after, query=query)


@router.get("/cached", response_model=List[ProductRecord])
async def cached_products(page: int = Query(1, ge=1), limit: int = Query(50, ge=1, le=250)):
    """Products as of the last catalog sync."""
    return await get_db().get_products(limit=limit, offset=(page - 1) * limit)


@router.post("", status_code=201)
async def create_product(
    product: Dict[str, Any] = Body(...),
    client: ShopifyClient = Depends(get_shopify_client),
):
    return await catalog.create_product(client, product)


@router.get("/{product_id}")
async def get_product(product_id: str, client: ShopifyClient = Depends(get_shopify_client)):
    product = await catalog.get_product(client, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    product: Dict[str, Any] = Body(...),
    client: ShopifyClient = Depends(get_shopify_client),
):
    return await catalog.update_product(client, product_id, product)


@router.post("/{product_id}/variants")
async def update_variants(
    product_id: str,
    variants: List[Dict[str, Any]] = Body(...),
    client: ShopifyClient = Depends(get_shopify_client),
):
    """Bulk update variants of one product. Each entry needs an "id"."""
    if any("id" not in variant for variant in variants):
        raise HTTPException(status_code=400, detail="Every variant needs an id")
    return await catalog.update_variants(client, product_id, variants)
