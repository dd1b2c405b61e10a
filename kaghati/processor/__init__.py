"""
Processor package: order, catalog, store coverage and sync operations.
"""

from .coverage import (
    adjust_radius,
    default_radius,
    distance_km,
    locate_ring,
    stores_covering,
    validate_radius,
)
from .hours import (
    add_time_slot,
    default_local_delivery,
    remove_time_slot,
    set_day_open,
    update_time_slot,
    validate_local_delivery,
    WEEK_DAYS,
)
from .notifications import (
    acknowledge,
    create_notification_log,
    mark_reviewed,
    pending_events,
    record_event,
)
from .orders import (
    cancel_order,
    cancel_split,
    create_split,
    get_order,
    list_orders,
    transition_split,
)
from .order_edit import edit_order, OrderEditError, OrderEditRequest, OrderEditResult
from .shipping import fetch_delivery_profiles, sync_shipping_profiles
from .sync import run_sync, start_sync, status_message, banner_visible, dismiss, SyncError
from .runner import run_sync_safely, shopify_client_from_settings, SyncResult

__all__ = [
    "adjust_radius",
    "default_radius",
    "distance_km",
    "locate_ring",
    "stores_covering",
    "validate_radius",
    "add_time_slot",
    "default_local_delivery",
    "remove_time_slot",
    "set_day_open",
    "update_time_slot",
    "validate_local_delivery",
    "WEEK_DAYS",
    "acknowledge",
    "create_notification_log",
    "mark_reviewed",
    "pending_events",
    "record_event",
    "cancel_order",
    "cancel_split",
    "create_split",
    "get_order",
    "list_orders",
    "transition_split",
    "edit_order",
    "OrderEditError",
    "OrderEditRequest",
    "OrderEditResult",
    "fetch_delivery_profiles",
    "sync_shipping_profiles",
    "run_sync",
    "start_sync",
    "status_message",
    "banner_visible",
    "dismiss",
    "SyncError",
    "run_sync_safely",
    "shopify_client_from_settings",
    "SyncResult",
]
