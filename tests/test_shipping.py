"""
Tests for the delivery profile cache.
"""

from kaghati.db import ShippingProfile
from kaghati.processor.shipping import parse_delivery_profiles, sync_shipping_profiles
from kaghati.shopify.queries import DELIVERY_PROFILES_QUERY

from conftest import FakeShopifyClient


def profile_node(profile_id, name, product_ids=()):
    return {
        "id": f"gid://shopify/DeliveryProfile/{profile_id}",
        "name": name,
        "originLocationCount": 2,
        "locationsWithoutRatesCount": 0,
        "profileLocationGroups": [{
            "locationGroup": {
                "id": "gid://shopify/DeliveryLocationGroup/1",
                "locations": {"edges": [{"node": {
                    "name": "Koramangala",
                    "address": {"formatted": ["80 Feet Rd", "Bengaluru"]},
                }}]},
            },
            "locationGroupZones": {"edges": [{"node": {
                "zone": {"id": "gid://shopify/DeliveryZone/3", "name": "India", "countries": []},
                "methodDefinitions": {"edges": [
                    {"node": {
                        "id": "gid://shopify/DeliveryMethodDefinition/4",
                        "name": "Standard",
                        "active": True,
                        "description": None,
                        "rateProvider": {
                            "id": "gid://shopify/DeliveryRateDefinition/5",
                            "price": {"amount": "49.0", "currencyCode": "INR"},
                        },
                    }},
                ]},
            }}]},
        }],
        "profileItems": {"nodes": [{"product": {"id": pid}} for pid in product_ids]},
    }


def response(*nodes):
    return {
        "shop": {"name": "Kaghati"},
        "deliveryProfiles": {"edges": [{"node": node} for node in nodes]},
    }


class TestParseDeliveryProfiles:
    def test_profile_is_flattened(self):
        profiles = parse_delivery_profiles(response(
            profile_node(1, "General", ["gid://shopify/Product/10"])
        ))

        profile = profiles[0]
        assert profile.delivery_profile_id == "gid://shopify/DeliveryProfile/1"
        assert profile.shop_name == "Kaghati"
        assert profile.profile_items == ["gid://shopify/Product/10"]
        assert profile.origin_location_count == 2

        group = profile.location_groups[0]
        assert group["locations"] == [{"name": "Koramangala", "address": ["80 Feet Rd", "Bengaluru"]}]
        method = group["zones"][0]["method_definitions"][0]
        assert method["name"] == "Standard"
        assert method["rate"]["price"] == {"amount": "49.0", "currencyCode": "INR"}

    def test_empty_response(self):
        assert parse_delivery_profiles({}) == []


class TestSyncShippingProfiles:
    def test_stale_profiles_are_removed(self, run_with_db):
        client = FakeShopifyClient({DELIVERY_PROFILES_QUERY: response(
            profile_node(1, "General"), profile_node(2, "Heavy goods")
        )})

        async def scenario(db):
            await db.upsert_shipping_profiles([
                ShippingProfile(delivery_profile_id="gid://shopify/DeliveryProfile/99", profile_name="Old"),
                ShippingProfile(delivery_profile_id="gid://shopify/DeliveryProfile/1", profile_name="Renamed"),
            ])
            count = await sync_shipping_profiles(client, db)
            return count, await db.get_shipping_profiles()

        count, profiles = run_with_db(scenario)

        assert count == 2
        assert [p.profile_name for p in profiles] == ["General", "Heavy goods"]
