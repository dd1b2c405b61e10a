"""
Order edit orchestration.

An edit is a sequence of independent Shopify mutations:
orderEditBegin -> setQuantity/addVariant per line -> orderEditCommit.
Each line step is best-effort; the calculated order is only committed when
at least one step went through. Nothing is rolled back: an uncommitted
calculated order is simply abandoned and expires on Shopify's side.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..db import SQLiteDatabase
from ..shopify import ShopifyClient, ShopifyClientError, to_gid, from_gid
from ..shopify.mutations import (
    ORDER_EDIT_BEGIN,
    ORDER_EDIT_SET_QUANTITY,
    ORDER_EDIT_ADD_VARIANT,
    ORDER_EDIT_COMMIT,
    ORDER_UPDATE,
)
from .orders import build_split_id, get_order

logger = logging.getLogger(__name__)


class OrderEditError(Exception):
    """The edit could not be started."""
    pass


class AddedItem(BaseModel):
    variant_id: str
    quantity: int = Field(gt=0)


class LineItemQuantity(BaseModel):
    id: str
    quantity: int = Field(ge=0)


class NoteAttribute(BaseModel):
    name: str
    value: str


class ReassignInfo(BaseModel):
    """Move the order's split to another store after the edit."""
    split_record_id: str
    order_number: int
    note_attributes: List[NoteAttribute]

    def attribute(self, name: str) -> str:
        for attr in self.note_attributes:
            if attr.name == name:
                return attr.value
        return ""


class OrderEditRequest(BaseModel):
    remove_items: List[str] = Field(default_factory=list)  # line item ids
    added_items: List[AddedItem] = Field(default_factory=list)
    line_items: List[LineItemQuantity] = Field(default_factory=list)  # requested quantities
    notify_customer: bool = False
    staff_note: str = "Edit order"
    reassign: Optional[ReassignInfo] = None


class EditStepResult(BaseModel):
    action: str  # remove | add | update | commit | reassign
    target: str
    success: bool
    error: Optional[str] = None


class OrderEditResult(BaseModel):
    order_id: str
    calculated_order_id: Optional[str] = None
    steps: List[EditStepResult] = Field(default_factory=list)
    committed: bool = False
    reassigned: bool = False

    @property
    def errors(self) -> List[str]:
        return [f"{s.action} {s.target}: {s.error}" for s in self.steps if not s.success]


def quantity_changes(
    original_line_items: List[Dict[str, Any]],
    requested: List[LineItemQuantity],
    removed: List[str],
) -> List[LineItemQuantity]:
    """
    Requested lines whose quantity differs from the order's current quantity.

    Lines unknown to the order, or already being removed, are skipped.
    """
    current = {
        from_gid(item["id"]): item.get("current_quantity", 0)
        for item in original_line_items
    }
    removed_ids = {from_gid(item_id) for item_id in removed}

    changes = []
    for item in requested:
        item_id = from_gid(item.id)
        if item_id in removed_ids or item_id not in current:
            continue
        if current[item_id] != item.quantity:
            changes.append(LineItemQuantity(id=item_id, quantity=item.quantity))
    return changes


async def edit_order(
    client: ShopifyClient,
    db: SQLiteDatabase,
    order_id: str,
    request: OrderEditRequest,
) -> OrderEditResult:
    """
    Apply line item removals, additions and quantity changes to an order.

    Raises:
        OrderEditError: If the order is missing or the edit cannot be begun
    """
    order_id = from_gid(order_id)
    result = OrderEditResult(order_id=order_id)
    logger.info(f"Edit requested for order {order_id}: {request.model_dump()}")

    updates: List[LineItemQuantity] = []
    if request.line_items:
        try:
            order = await get_order(client, order_id)
        except ShopifyClientError as e:
            raise OrderEditError(f"Failed to load order {order_id}: {e}") from e
        if order is None:
            raise OrderEditError(f"Order not found: {order_id}")
        updates = quantity_changes(order["line_items"], request.line_items, request.remove_items)

    if not (request.remove_items or request.added_items or updates):
        logger.info(f"Nothing to edit on order {order_id}")
        return result

    # Step 1: begin
    try:
        payload = await client.mutate(
            ORDER_EDIT_BEGIN, {"id": to_gid("Order", order_id)}, "orderEditBegin"
        )
    except ShopifyClientError as e:
        logger.error(f"Error beginning edit of order {order_id}: {e}")
        raise OrderEditError(f"Failed to begin edit of order {order_id}: {e}") from e

    calculated_order_id = (payload.get("calculatedOrder") or {}).get("id")
    if not calculated_order_id:
        raise OrderEditError(f"No calculated order returned for order {order_id}")
    result.calculated_order_id = calculated_order_id

    # Step 2: line changes
    for item_id in request.remove_items:
        await _run_step(
            result, client, "remove", item_id, ORDER_EDIT_SET_QUANTITY,
            {
                "id": calculated_order_id,
                "lineItemId": to_gid("CalculatedLineItem", from_gid(item_id)),
                "quantity": 0,
                "restock": True,
            },
            "orderEditSetQuantity",
        )

    for item in request.added_items:
        await _run_step(
            result, client, "add", item.variant_id, ORDER_EDIT_ADD_VARIANT,
            {
                "id": calculated_order_id,
                "variantId": to_gid("ProductVariant", item.variant_id),
                "quantity": item.quantity,
            },
            "orderEditAddVariant",
        )

    for item in updates:
        await _run_step(
            result, client, "update", item.id, ORDER_EDIT_SET_QUANTITY,
            {
                "id": calculated_order_id,
                "lineItemId": to_gid("CalculatedLineItem", item.id),
                "quantity": item.quantity,
                "restock": True,
            },
            "orderEditSetQuantity",
        )

    if not any(step.success for step in result.steps):
        logger.warning(f"No edit step succeeded for order {order_id}, not committing")
        return result

    # Step 3: commit
    result.committed = await _run_step(
        result, client, "commit", calculated_order_id, ORDER_EDIT_COMMIT,
        {
            "id": calculated_order_id,
            "notifyCustomer": request.notify_customer,
            "staffNote": request.staff_note,
        },
        "orderEditCommit",
    )

    # Step 4: reassign to another store
    if result.committed and request.reassign:
        result.reassigned = await _reassign(result, client, db, order_id, request.reassign)

    return result


async def _run_step(
    result: OrderEditResult,
    client: ShopifyClient,
    action: str,
    target: str,
    mutation: str,
    variables: Dict[str, Any],
    root: str,
) -> bool:
    """Run one mutation, recording its outcome instead of raising."""
    try:
        await client.mutate(mutation, variables, root)
    except ShopifyClientError as e:
        logger.error(f"Error during {action} of {target}: {e}")
        result.steps.append(EditStepResult(action=action, target=target, success=False, error=str(e)))
        return False

    logger.info(f"Order edit step {action} {target} succeeded")
    result.steps.append(EditStepResult(action=action, target=target, success=True))
    return True


async def _reassign(
    result: OrderEditResult,
    client: ShopifyClient,
    db: SQLiteDatabase,
    order_id: str,
    reassign: ReassignInfo,
) -> bool:
    attributes = [
        {"key": attr.name, "value": attr.value} for attr in reassign.note_attributes
    ]
    ok = await _run_step(
        result, client, "reassign", order_id, ORDER_UPDATE,
        {"input": {"id": to_gid("Order", order_id), "customAttributes": attributes}},
        "orderUpdate",
    )
    if not ok:
        return False

    split = await db.update_order_split(
        reassign.split_record_id,
        split_id=build_split_id(reassign.order_number, reassign.attribute("_outletId")),
        store_code=reassign.attribute("_storeCode"),
        store_name=reassign.attribute("_storeName"),
        re_assign_status=True,
    )
    if split is None:
        result.steps.append(EditStepResult(
            action="reassign", target=reassign.split_record_id, success=False,
            error="Order split not found",
        ))
        return False

    logger.info(f"Order {order_id} reassigned to store {split.store_code}")
    return True
