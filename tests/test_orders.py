"""
Tests for order reads, cancellation and split status transitions.
"""

import asyncio

import pytest

from kaghati.db import SplitStatus
from kaghati.processor.orders import (
    cancel_order,
    cancel_split,
    create_split,
    get_order,
    list_orders,
    normalize_order,
    transition_split,
)
from kaghati.shopify import ShopifyUserError
from kaghati.shopify.mutations import FULFILLMENT_CANCEL, ORDER_CANCEL
from kaghati.shopify.queries import ORDER_QUERY, ORDERS_QUERY

from conftest import FakeShopifyClient


def order_node(fulfillments=None):
    return {
        "id": "gid://shopify/Order/1001",
        "name": "#1001",
        "createdAt": "2024-05-01T10:00:00Z",
        "displayFinancialStatus": "PAID",
        "displayFulfillmentStatus": "FULFILLED",
        "currentTotalPriceSet": {"shopMoney": {"amount": "450.00", "currencyCode": "INR"}},
        "customAttributes": [{"key": "_storeCode", "value": "S1"}],
        "fulfillments": fulfillments or [],
        "lineItems": {"edges": [{"node": {
            "id": "gid://shopify/LineItem/11",
            "name": "Notebook",
            "sku": "NB-1",
            "quantity": 3,
            "currentQuantity": 2,
            "variant": {"id": "gid://shopify/ProductVariant/21"},
            "originalUnitPriceSet": {"shopMoney": {"amount": "150.00", "currencyCode": "INR"}},
        }}]},
    }


OK_CANCEL = {"orderCancel": {"job": {"id": "gid://shopify/Job/7"}, "orderCancelUserErrors": [], "userErrors": []}}


class TestNormalizeOrder:
    def test_flattens_order(self):
        order = normalize_order(order_node())

        assert order["id"] == "1001"
        assert order["total"] == {"amount": "450.00", "currency": "INR"}
        assert order["line_items"][0]["id"] == "11"
        assert order["line_items"][0]["current_quantity"] == 2
        assert order["line_items"][0]["variant_id"] == "21"
        assert order["line_items"][0]["unit_price"]["amount"] == "150.00"


class TestOrderReads:
    def test_get_order(self):
        client = FakeShopifyClient({ORDER_QUERY: {"order": order_node()}})

        order = asyncio.run(get_order(client, "1001"))

        assert order["name"] == "#1001"
        assert client.calls_to(ORDER_QUERY) == [{"id": "gid://shopify/Order/1001"}]

    def test_get_missing_order(self):
        client = FakeShopifyClient({ORDER_QUERY: {"order": None}})
        assert asyncio.run(get_order(client, "1")) is None

    def test_list_orders(self):
        client = FakeShopifyClient({ORDERS_QUERY: {"orders": {
            "edges": [{"node": order_node()}],
            "pageInfo": {"hasNextPage": False, "endCursor": "abc"},
        }}})

        page = asyncio.run(list_orders(client, first=10, query="status:open"))

        assert [order["id"] for order in page["orders"]] == ["1001"]
        assert page["page_info"]["endCursor"] == "abc"
        assert client.calls_to(ORDERS_QUERY)[0] == {"first": 10, "after": None, "query": "status:open"}


class TestCancelOrder:
    """Tests for cancel_order."""

    def test_successful_fulfillment_is_cancelled_first(self):
        fulfillments = [
            {"id": "gid://shopify/Fulfillment/4", "status": "CANCELLED"},
            {"id": "gid://shopify/Fulfillment/5", "status": "SUCCESS"},
        ]
        client = FakeShopifyClient({
            ORDER_QUERY: {"order": order_node(fulfillments)},
            FULFILLMENT_CANCEL: {"fulfillmentCancel": {"fulfillment": {"id": "gid://shopify/Fulfillment/5"}, "userErrors": []}},
            ORDER_CANCEL: OK_CANCEL,
        })

        result = asyncio.run(cancel_order(client, "1001"))

        assert result == {"success": True, "order_id": "1001", "job_id": "gid://shopify/Job/7"}
        assert client.calls_to(FULFILLMENT_CANCEL) == [{"id": "gid://shopify/Fulfillment/5"}]
        cancel_vars = client.calls_to(ORDER_CANCEL)[0]
        assert cancel_vars["orderId"] == "gid://shopify/Order/1001"
        assert cancel_vars["restock"] is True
        assert cancel_vars["refund"] is False

    def test_unfulfilled_order_is_cancelled_directly(self):
        client = FakeShopifyClient({ORDER_QUERY: {"order": order_node()}, ORDER_CANCEL: OK_CANCEL})

        asyncio.run(cancel_order(client, "1001"))

        assert client.calls_to(FULFILLMENT_CANCEL) == []
        assert len(client.calls_to(ORDER_CANCEL)) == 1

    def test_cancel_user_errors_raise(self):
        client = FakeShopifyClient({
            ORDER_QUERY: {"order": order_node()},
            ORDER_CANCEL: {"orderCancel": {
                "job": None,
                "orderCancelUserErrors": [{"field": ["orderId"], "message": "Order is already cancelled"}],
                "userErrors": [],
            }},
        })

        with pytest.raises(ShopifyUserError, match="already cancelled"):
            asyncio.run(cancel_order(client, "1001"))

    def test_missing_order_raises(self):
        client = FakeShopifyClient({ORDER_QUERY: {"order": None}})

        with pytest.raises(ValueError):
            asyncio.run(cancel_order(client, "1001"))


class TestSplitTransitions:
    """Tests for create_split and transition_split."""

    def test_new_split_is_stamped_and_announced(self, run_with_db):
        async def scenario(db):
            split = await create_split(db, "gid://shopify/Order/1001", 1001, "OUT1", "S1", "Store One")
            return split, await db.get_notifications(pending_only=True)

        split, events = run_with_db(scenario)

        assert split.split_id == "1001-OUT1"
        assert split.order_reference_id == "1001"
        assert split.order_status == SplitStatus.NEW
        assert "new" in split.time_stamp
        assert [(e.event, e.order_name, e.outlet_id) for e in events] == [("new_order", "#1001", "OUT1")]

    def test_on_hold_then_confirm(self, run_with_db):
        async def scenario(db):
            split = await create_split(db, "1001", 1001, "OUT1", "S1", "Store One")
            held = await transition_split(db, split.id, SplitStatus.ON_HOLD, "Awaiting stock", now_ms=1000)
            confirmed = await transition_split(db, split.id, SplitStatus.CONFIRM, now_ms=2000)
            return held, confirmed, await db.get_notifications()

        held, confirmed, events = run_with_db(scenario)

        assert held.on_hold_status == "open"
        assert held.on_hold_comment == "Awaiting stock"
        assert confirmed.order_status == SplitStatus.CONFIRM
        assert confirmed.on_hold_status == "closed"
        assert confirmed.time_stamp["on_hold"] == 1000
        assert confirmed.time_stamp["confirm"] == 2000
        assert [e.event for e in events] == ["new_order", "on_hold", "confirm"]

    def test_terminal_split_cannot_move(self, run_with_db):
        async def scenario(db):
            split = await create_split(db, "1001", 1001, "OUT1", "S1", "Store One")
            await transition_split(db, split.id, SplitStatus.DELIVERED)
            await transition_split(db, split.id, SplitStatus.CANCEL)

        with pytest.raises(ValueError):
            run_with_db(scenario)

    def test_missing_split(self, run_with_db):
        async def scenario(db):
            await transition_split(db, "missing", SplitStatus.CONFIRM)

        with pytest.raises(LookupError):
            run_with_db(scenario)

    def test_split_cannot_go_back_to_new(self, run_with_db):
        async def scenario(db):
            split = await create_split(db, "1001", 1001, "OUT1", "S1", "Store One")
            await transition_split(db, split.id, SplitStatus.NEW)

        with pytest.raises(ValueError):
            run_with_db(scenario)


class TestCancelSplit:
    """Tests for cancel_split."""

    def test_shopify_order_is_cancelled_with_the_split(self, run_with_db):
        client = FakeShopifyClient({ORDER_QUERY: {"order": order_node()}, ORDER_CANCEL: OK_CANCEL})

        async def scenario(db):
            split = await create_split(db, "1001", 1001, "OUT1", "S1", "Store One")
            await transition_split(db, split.id, SplitStatus.ON_HOLD, "No stock")
            return await cancel_split(client, db, split.id, "Customer asked")

        split = run_with_db(scenario)

        assert split.order_status == SplitStatus.CANCEL
        assert split.on_hold_status == "closed"
        cancel_vars = client.calls_to(ORDER_CANCEL)[0]
        assert cancel_vars["orderId"] == "gid://shopify/Order/1001"
        assert cancel_vars["staffNote"] == "Customer asked"

    def test_refused_cancel_leaves_split_open(self, run_with_db):
        client = FakeShopifyClient({
            ORDER_QUERY: {"order": order_node()},
            ORDER_CANCEL: {"orderCancel": {
                "orderCancelUserErrors": [{"field": ["orderId"], "message": "Order cannot be cancelled"}],
                "userErrors": [],
            }},
        })

        async def scenario(db):
            split = await create_split(db, "1001", 1001, "OUT1", "S1", "Store One")
            with pytest.raises(ShopifyUserError):
                await cancel_split(client, db, split.id)
            return await db.get_order_split(split.id)

        assert run_with_db(scenario).order_status == SplitStatus.NEW

    def test_already_cancelled_order_is_not_cancelled_again(self, run_with_db):
        cancelled = {**order_node(), "cancelledAt": "2024-05-02T09:00:00Z"}
        client = FakeShopifyClient({ORDER_QUERY: {"order": cancelled}})

        async def scenario(db):
            split = await create_split(db, "1001", 1001, "OUT1", "S1", "Store One")
            return await cancel_split(client, db, split.id)

        assert run_with_db(scenario).order_status == SplitStatus.CANCEL
        assert client.calls_to(ORDER_CANCEL) == []

    def test_terminal_split_is_not_sent_to_shopify(self, run_with_db):
        client = FakeShopifyClient()

        async def scenario(db):
            split = await create_split(db, "1001", 1001, "OUT1", "S1", "Store One")
            await transition_split(db, split.id, SplitStatus.DELIVERED)
            await cancel_split(client, db, split.id)

        with pytest.raises(ValueError):
            run_with_db(scenario)
        assert client.calls == []
