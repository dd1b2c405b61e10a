"""
Shopify delivery profile cache.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List

from ..db import SQLiteDatabase, ShippingProfile
from ..shopify import ShopifyClient
from ..shopify.queries import DELIVERY_PROFILES_QUERY

logger = logging.getLogger(__name__)


def _nodes(connection: Any) -> List[Dict[str, Any]]:
    if not connection:
        return []
    if "nodes" in connection:
        return list(connection["nodes"] or [])
    return [edge["node"] for edge in connection.get("edges", [])]


def _rate(rate_provider: Dict[str, Any]) -> Dict[str, Any]:
    if not rate_provider:
        return {}
    if "price" in rate_provider:
        return {"id": rate_provider.get("id"), "price": rate_provider.get("price")}
    return {
        "id": rate_provider.get("id"),
        "fixed_fee": rate_provider.get("fixedFee"),
        "percentage_of_rate_fee": rate_provider.get("percentageOfRateFee"),
    }


def _location_group(group: Dict[str, Any]) -> Dict[str, Any]:
    location_group = group.get("locationGroup") or {}
    locations = [
        {
            "name": location.get("name"),
            "address": (location.get("address") or {}).get("formatted") or [],
        }
        for location in _nodes(location_group.get("locations"))
    ]

    zones = []
    for group_zone in _nodes(group.get("locationGroupZones")):
        zone = group_zone.get("zone") or {}
        zones.append({
            "id": zone.get("id"),
            "name": zone.get("name"),
            "countries": zone.get("countries") or [],
            "method_definitions": [
                {
                    "id": method.get("id"),
                    "name": method.get("name"),
                    "active": method.get("active", False),
                    "description": method.get("description"),
                    "rate": _rate(method.get("rateProvider") or {}),
                }
                for method in _nodes(group_zone.get("methodDefinitions"))
            ],
        })

    return {"id": location_group.get("id"), "locations": locations, "zones": zones}


def parse_delivery_profiles(data: Dict[str, Any]) -> List[ShippingProfile]:
    """Flatten a deliveryProfiles response into cacheable profiles."""
    shop_name = (data.get("shop") or {}).get("name", "")
    synced_at = datetime.utcnow()

    profiles = []
    for node in _nodes(data.get("deliveryProfiles")):
        product_ids = [
            item["product"]["id"]
            for item in _nodes(node.get("profileItems"))
            if (item.get("product") or {}).get("id")
        ]
        profiles.append(ShippingProfile(
            delivery_profile_id=node["id"],
            profile_name=node.get("name", ""),
            shop_name=shop_name,
            location_groups=[
                _location_group(group) for group in node.get("profileLocationGroups") or []
            ],
            profile_items=product_ids,
            origin_location_count=node.get("originLocationCount") or 0,
            locations_without_rates_count=node.get("locationsWithoutRatesCount") or 0,
            synced_at=synced_at,
        ))
    return profiles


async def fetch_delivery_profiles(client: ShopifyClient, first: int = 50) -> List[ShippingProfile]:
    data = await client.execute(DELIVERY_PROFILES_QUERY, {"first": first})
    profiles = parse_delivery_profiles(data)
    logger.info(f"Fetched {len(profiles)} delivery profiles")
    return profiles


async def sync_shipping_profiles(client: ShopifyClient, db: SQLiteDatabase) -> int:
    """
    Refresh the local profile cache from Shopify.

    Profiles deleted on Shopify are removed from the cache.

    Returns:
        Number of profiles cached
    """
    profiles = await fetch_delivery_profiles(client)
    await db.upsert_shipping_profiles(profiles)
    removed = await db.delete_shipping_profiles_except(p.delivery_profile_id for p in profiles)
    if removed:
        logger.info(f"Removed {removed} stale delivery profiles")
    return len(profiles)
