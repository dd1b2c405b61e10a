"""
Order event notifications and operator notification logs.
"""

import logging
from typing import List, Optional

from ..db import SQLiteDatabase, Notification, NotificationLog, LogType

logger = logging.getLogger(__name__)


async def record_event(
    db: SQLiteDatabase,
    event: str,
    order_name: str = "",
    outlet_id: str = "",
    store_code: str = "",
    store_name: str = "",
) -> Notification:
    """Queue an order event for polling clients."""
    notification = Notification(
        event=event,
        order_name=order_name,
        outlet_id=outlet_id,
        store_code=store_code,
        store_name=store_name,
    )
    await db.create_notification(notification)
    logger.info(f"Recorded '{event}' event for {order_name or 'n/a'} ({store_code or 'all stores'})")
    return notification


async def pending_events(
    db: SQLiteDatabase,
    store_code: Optional[str] = None,
    limit: int = 50
) -> List[Notification]:
    """Events not yet acknowledged, oldest first."""
    return await db.get_notifications(pending_only=True, store_code=store_code, limit=limit)


async def acknowledge(db: SQLiteDatabase, notification_ids: List[str]) -> int:
    """Mark events as delivered so they are not returned again."""
    count = await db.mark_notifications_triggered(notification_ids)
    logger.debug(f"Acknowledged {count} notifications")
    return count


async def create_notification_log(
    db: SQLiteDatabase,
    title: str,
    markdown: str,
    is_success: bool,
    shop: str = "",
    notification_type: str = "setting",
) -> Optional[NotificationLog]:
    """
    Store an operator-facing message.

    notification_view_status is the "needs review" flag: failures are
    logged as error with the flag set, successes as info without it.
    Storage errors are logged and swallowed so callers never fail on a
    notification.
    """
    log = NotificationLog(
        log_type=LogType.INFO if is_success else LogType.ERROR,
        notification_info=title,
        notification_details=markdown,
        notification_type=notification_type,
        notification_view_status=not is_success,
        shop=shop,
    )
    try:
        return await db.create_notification_log(log)
    except Exception as e:
        logger.error(f"Failed to create notification: {e}")
        return None


async def mark_reviewed(db: SQLiteDatabase, log_id: str) -> bool:
    """Clear the review flag of a notification log entry."""
    return await db.clear_notification_log_flag(log_id)
