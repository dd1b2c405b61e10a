"""
Shipping profile routes.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..db import ShippingProfile
from ..dependencies import get_db, get_shopify_client, require_auth
from ..processor import sync_shipping_profiles
from ..shopify import ShopifyClient, to_gid

router = APIRouter(prefix="/api/shipping-profiles", dependencies=[Depends(require_auth)])


@router.get("", response_model=List[ShippingProfile])
async def list_profiles():
    """Cached delivery profiles."""
    return await get_db().get_shipping_profiles()


@router.post("/sync")
async def sync_profiles(client: ShopifyClient = Depends(get_shopify_client)):
    count = await sync_shipping_profiles(client, get_db())
    return {"success": True, "count": count}


@router.get("/{profile_id}", response_model=ShippingProfile)
async def get_profile(profile_id: str):
    profile = await get_db().get_shipping_profile(to_gid("DeliveryProfile", profile_id))
    if not profile:
        raise HTTPException(status_code=404, detail="Shipping profile not found")
    return profile
