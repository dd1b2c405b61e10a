"""
Order reads, cancellation, and per-store split status.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from ..db import SQLiteDatabase, OrderSplit, SplitStatus
from ..shopify import ShopifyClient, ShopifyUserError, to_gid, from_gid
from ..shopify.mutations import FULFILLMENT_CANCEL, ORDER_CANCEL
from ..shopify.queries import ORDER_QUERY, ORDERS_QUERY
from .notifications import record_event

logger = logging.getLogger(__name__)


TERMINAL_SPLIT_STATUSES = {SplitStatus.DELIVERED, SplitStatus.CANCEL}


def _money(price_set: Optional[dict]) -> Dict[str, Optional[str]]:
    shop_money = (price_set or {}).get("shopMoney") or {}
    return {
        "amount": shop_money.get("amount"),
        "currency": shop_money.get("currencyCode"),
    }


def normalize_line_item(node: Dict[str, Any]) -> Dict[str, Any]:
    variant = node.get("variant") or {}
    return {
        "id": from_gid(node["id"]),
        "gid": node["id"],
        "name": node.get("name"),
        "sku": node.get("sku"),
        "quantity": node.get("quantity", 0),
        "current_quantity": node.get("currentQuantity", node.get("quantity", 0)),
        "variant_id": from_gid(variant["id"]) if variant.get("id") else None,
        "unit_price": _money(node.get("originalUnitPriceSet")),
    }


def normalize_order(node: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten an Order node into the shape the API returns."""
    line_items = [
        normalize_line_item(edge["node"])
        for edge in (node.get("lineItems") or {}).get("edges", [])
    ]
    return {
        "id": from_gid(node["id"]),
        "gid": node["id"],
        "name": node.get("name"),
        "created_at": node.get("createdAt"),
        "cancelled_at": node.get("cancelledAt"),
        "financial_status": node.get("displayFinancialStatus"),
        "fulfillment_status": node.get("displayFulfillmentStatus"),
        "note": node.get("note"),
        "email": node.get("email"),
        "phone": node.get("phone"),
        "total": _money(node.get("currentTotalPriceSet")),
        "customer": node.get("customer"),
        "custom_attributes": node.get("customAttributes") or [],
        "fulfillments": node.get("fulfillments") or [],
        "line_items": line_items,
    }


async def get_order(client: ShopifyClient, order_id: str) -> Optional[Dict[str, Any]]:
    data = await client.execute(ORDER_QUERY, {"id": to_gid("Order", order_id)})
    node = data.get("order")
    return normalize_order(node) if node else None


async def list_orders(
    client: ShopifyClient,
    first: int = 25,
    after: Optional[str] = None,
    query: Optional[str] = None,
) -> Dict[str, Any]:
    data = await client.execute(
        ORDERS_QUERY, {"first": first, "after": after, "query": query}
    )
    connection = data.get("orders") or {}
    return {
        "orders": [normalize_order(edge["node"]) for edge in connection.get("edges", [])],
        "page_info": connection.get("pageInfo") or {},
    }


async def cancel_order(
    client: ShopifyClient,
    order_id: str,
    reason: str = "CUSTOMER",
    restock: bool = True,
    refund: bool = False,
    notify_customer: bool = False,
    staff_note: str = "Order cancelled via API",
) -> Dict[str, Any]:
    """
    Cancel an order, cancelling its successful fulfillment first.

    Raises:
        ShopifyUserError: If Shopify refuses either cancellation
        ValueError: If the order does not exist
    """
    order_gid = to_gid("Order", order_id)
    logger.info(f"Starting order cancellation for {order_gid}")

    order = await get_order(client, order_id)
    if order is None:
        raise ValueError(f"Order not found: {order_id}")

    for fulfillment in order["fulfillments"]:
        if (fulfillment.get("status") or "").upper() == "SUCCESS":
            logger.info(f"Cancelling fulfillment {fulfillment['id']}")
            await client.mutate(
                FULFILLMENT_CANCEL, {"id": fulfillment["id"]}, "fulfillmentCancel"
            )
            break

    data = await client.execute(
        ORDER_CANCEL,
        {
            "orderId": order_gid,
            "reason": reason,
            "refund": refund,
            "restock": restock,
            "notifyCustomer": notify_customer,
            "staffNote": staff_note,
        },
    )
    payload = data.get("orderCancel") or {}
    errors = (payload.get("orderCancelUserErrors") or []) + (payload.get("userErrors") or [])
    if errors:
        logger.error(f"Error cancelling order {order_gid}: {errors}")
        raise ShopifyUserError("orderCancel", errors)

    job_id = (payload.get("job") or {}).get("id")
    logger.info(f"Order {order_gid} cancelled (job {job_id})")

    return {"success": True, "order_id": from_gid(order_gid), "job_id": job_id}


# ===== Splits =====

def build_split_id(order_number: Any, outlet_id: str) -> str:
    return f"{order_number}-{outlet_id}"


async def create_split(
    db: SQLiteDatabase,
    order_reference_id: str,
    order_number: int,
    outlet_id: str,
    store_code: str,
    store_name: str,
    erp_store_id: str = "",
    line_items: Optional[List[Dict[str, Any]]] = None,
) -> OrderSplit:
    split = OrderSplit(
        split_id=build_split_id(order_number, outlet_id),
        order_reference_id=from_gid(order_reference_id),
        order_number=order_number,
        store_code=store_code,
        store_name=store_name,
        erp_store_id=erp_store_id,
        line_items=line_items or [],
        time_stamp={SplitStatus.NEW.value: int(time.time() * 1000)},
    )
    await db.create_order_split(split)
    await record_event(
        db, "new_order", f"#{order_number}", outlet_id, store_code, store_name
    )
    return split


async def transition_split(
    db: SQLiteDatabase,
    split_record_id: str,
    status: SplitStatus,
    comment: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> OrderSplit:
    """
    Move a split to a new fulfilment status and stamp the time.

    Raises:
        LookupError: If the split does not exist
        ValueError: If the split is already delivered or cancelled
    """
    split = await db.get_order_split(split_record_id)
    if split is None:
        raise LookupError(f"Order split not found: {split_record_id}")

    if status == SplitStatus.NEW:
        raise ValueError("A split cannot be moved back to new")
    if split.order_status in TERMINAL_SPLIT_STATUSES:
        raise ValueError(
            f"Split {split.split_id} is already {split.order_status.value}"
        )

    time_stamp = dict(split.time_stamp)
    time_stamp[status.value] = now_ms if now_ms is not None else int(time.time() * 1000)

    updates: Dict[str, Any] = {"order_status": status, "time_stamp": time_stamp}
    if status in (SplitStatus.CONFIRM, SplitStatus.CANCEL):
        updates["on_hold_status"] = "closed"
    elif status == SplitStatus.ON_HOLD:
        updates["on_hold_status"] = "open"
        updates["on_hold_comment"] = comment or ""

    updated = await db.update_order_split(split_record_id, **updates)
    logger.info(f"Split {split.split_id}: {split.order_status.value} -> {status.value}")

    outlet_id = split.split_id.split("-", 1)[1] if "-" in split.split_id else ""
    await record_event(
        db, status.value, f"#{split.order_number}", outlet_id,
        split.store_code, split.store_name
    )
    return updated


async def cancel_split(
    client: ShopifyClient,
    db: SQLiteDatabase,
    split_record_id: str,
    comment: Optional[str] = None,
) -> OrderSplit:
    """
    Cancel the Shopify order behind a split, then mark the split cancelled.

    The split is left unchanged when Shopify refuses the cancellation.

    Raises:
        LookupError: If the split does not exist
        ValueError: If the split is already delivered or cancelled
        ShopifyUserError: If Shopify refuses the cancellation
    """
    split = await db.get_order_split(split_record_id)
    if split is None:
        raise LookupError(f"Order split not found: {split_record_id}")
    if split.order_status in TERMINAL_SPLIT_STATUSES:
        raise ValueError(f"Split {split.split_id} is already {split.order_status.value}")

    order = await get_order(client, split.order_reference_id)
    if order is None:
        raise LookupError(f"Order not found: {split.order_reference_id}")
    if order.get("cancelled_at"):
        logger.info(f"Order {split.order_reference_id} is already cancelled on Shopify")
    else:
        await cancel_order(
            client,
            split.order_reference_id,
            staff_note=comment or f"Split {split.split_id} cancelled",
        )

    return await transition_split(db, split_record_id, SplitStatus.CANCEL, comment)
