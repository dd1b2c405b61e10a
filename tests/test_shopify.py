"""
Tests for the Shopify GraphQL client and bulk export parsing.
"""

import asyncio
import json
import logging

import httpx
import pytest

from kaghati.shopify import (
    ShopifyAuthError,
    ShopifyClient,
    ShopifyClientError,
    ShopifyRateLimitError,
    ShopifyUserError,
    from_gid,
    normalize_shop_domain,
    parse_product_lines,
    to_gid,
)


OK = {"data": {"shop": {"name": "Kaghati"}}}


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(ShopifyClient, "BASE_RETRY_DELAY", 0)


def run_client(responses, call):
    """
    Run call(client) against a client whose HTTP answers come from responses.

    Returns the call result and the list of JSON payloads that were posted.
    """
    requests = []
    pending = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return pending.pop(0) if len(pending) > 1 else pending[0]

    async def main():
        client = ShopifyClient("kaghati", "test-token")
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        try:
            return await call(client)
        finally:
            await client.close()

    return asyncio.run(main()), requests


class TestExecute:
    """Tests for ShopifyClient.execute."""

    def test_returns_data(self):
        result, requests = run_client(
            [httpx.Response(200, json=OK)],
            lambda client: client.execute("{ shop { name } }", {"first": 1}),
        )

        assert result == {"shop": {"name": "Kaghati"}}
        assert requests == [{"query": "{ shop { name } }", "variables": {"first": 1}}]

    def test_rate_limited_request_is_retried(self):
        result, requests = run_client(
            [httpx.Response(429), httpx.Response(200, json=OK)],
            lambda client: client.execute("{ shop { name } }"),
        )

        assert result == OK["data"]
        assert len(requests) == 2

    def test_throttled_query_is_retried(self):
        throttled = {"errors": [{"message": "Throttled"}]}

        result, requests = run_client(
            [httpx.Response(200, json=throttled), httpx.Response(200, json=OK)],
            lambda client: client.execute("{ shop { name } }"),
        )

        assert result == OK["data"]
        assert len(requests) == 2

    def test_gives_up_after_max_retries(self):
        with pytest.raises(ShopifyRateLimitError):
            run_client([httpx.Response(429)], lambda client: client.execute("{ shop { name } }"))

    def test_auth_error_is_not_retried(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(401)

        async def main():
            client = ShopifyClient("kaghati", "bad-token")
            client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            try:
                await client.execute("{ shop { name } }")
            finally:
                await client.close()

        with pytest.raises(ShopifyAuthError):
            asyncio.run(main())
        assert len(requests) == 1

    def test_graphql_errors_raise(self):
        failed = {"errors": [{"message": "Field 'nope' doesn't exist on type 'Shop'"}]}

        with pytest.raises(ShopifyClientError, match="doesn't exist"):
            run_client([httpx.Response(200, json=failed)], lambda client: client.execute("{ shop { nope } }"))

    def test_low_throttle_points_are_logged(self, caplog):
        low = {
            **OK,
            "extensions": {"cost": {"throttleStatus": {"currentlyAvailable": 40}}},
        }

        with caplog.at_level(logging.WARNING, logger="kaghati.shopify.client"):
            run_client([httpx.Response(200, json=low)], lambda client: client.execute("{ shop { name } }"))

        assert "Low rate limit points: 40 available" in caplog.text


class TestMutate:
    """Tests for ShopifyClient.mutate."""

    def test_returns_root_payload(self):
        body = {"data": {"orderUpdate": {"order": {"id": "gid://shopify/Order/1"}, "userErrors": []}}}

        payload, _ = run_client(
            [httpx.Response(200, json=body)],
            lambda client: client.mutate("mutation { orderUpdate }", None, "orderUpdate"),
        )

        assert payload["order"] == {"id": "gid://shopify/Order/1"}

    def test_user_errors_raise(self):
        errors = [{"field": ["id"], "message": "Order does not exist"}]
        body = {"data": {"orderUpdate": {"order": None, "userErrors": errors}}}

        with pytest.raises(ShopifyUserError) as exc_info:
            run_client(
                [httpx.Response(200, json=body)],
                lambda client: client.mutate("mutation { orderUpdate }", None, "orderUpdate"),
            )

        assert exc_info.value.errors == errors
        assert "Order does not exist" in str(exc_info.value)


class TestIds:
    def test_to_gid(self):
        assert to_gid("Order", 1001) == "gid://shopify/Order/1001"
        assert to_gid("Order", "gid://shopify/Order/1001") == "gid://shopify/Order/1001"

    def test_from_gid(self):
        assert from_gid("gid://shopify/LineItem/11") == "11"
        assert from_gid("11") == "11"


class TestNormalizeShopDomain:
    def test_bare_name_gets_myshopify_suffix(self):
        assert normalize_shop_domain("Kaghati") == "kaghati.myshopify.com"

    def test_scheme_and_slash_are_stripped(self):
        assert normalize_shop_domain("https://kaghati.myshopify.com/") == "kaghati.myshopify.com"


class TestParseProductLines:
    """Tests for rebuilding products from bulk JSONL lines."""

    def test_variants_are_attached_to_their_product(self):
        lines = [
            {"id": "gid://shopify/Product/1", "title": "Notebook", "status": "ACTIVE",
             "createdAt": "2024-01-01T00:00:00Z"},
            {"id": "gid://shopify/ProductVariant/11", "price": "150.00", "sku": "NB-A5",
             "__parentId": "gid://shopify/Product/1"},
            {"id": "gid://shopify/Product/2", "title": "Pen", "status": "DRAFT"},
            {"id": "gid://shopify/ProductVariant/21", "price": "20.00",
             "__parentId": "gid://shopify/Product/2"},
            {"id": "gid://shopify/ProductVariant/12", "price": "180.00",
             "__parentId": "gid://shopify/Product/1"},
        ]

        products = {p.product_id: p for p in parse_product_lines(lines)}

        notebook = products["gid://shopify/Product/1"]
        assert notebook.title == "Notebook"
        assert notebook.created_at.year == 2024
        assert [v["id"] for v in notebook.variants] == [
            "gid://shopify/ProductVariant/11", "gid://shopify/ProductVariant/12",
        ]
        assert notebook.variants[0]["sku"] == "NB-A5"
        assert [v["price"] for v in products["gid://shopify/Product/2"].variants] == ["20.00"]

    def test_orphan_variant_is_dropped(self):
        lines = [{"id": "gid://shopify/ProductVariant/9", "__parentId": "gid://shopify/Product/404"}]
        assert parse_product_lines(lines) == []
