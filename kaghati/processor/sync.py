"""
Catalog and delivery profile sync with a pollable status record.
"""

import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, Optional

from ..db import SQLiteDatabase, SyncStatus, SyncTypeStatus, SyncState, ProductRecord
from ..shopify import ShopifyClient, BulkOperationsManager
from .notifications import create_notification_log
from .shipping import sync_shipping_profiles

logger = logging.getLogger(__name__)


PRODUCT_SYNC = "productSync"
PROFILE_SYNC = "profileSync"

# A run still marked as syncing after this long is treated as abandoned
STALE_SYNC_AFTER = timedelta(hours=2)

ClientFactory = Callable[[], ShopifyClient]


class SyncError(Exception):
    """Error during sync process."""
    pass


async def sync_products(client: ShopifyClient, db: SQLiteDatabase) -> int:
    """Replace the product cache with a bulk export of the catalog."""
    bulk_ops = BulkOperationsManager(client)
    parsed_products = await bulk_ops.fetch_products()

    records = [
        ProductRecord(
            product_id=parsed.product_id,
            title=parsed.title,
            status=parsed.status,
            created_at=parsed.created_at,
            variants=parsed.variants,
        )
        for parsed in parsed_products
    ]
    return await db.replace_products(records)


SYNC_HANDLERS: Dict[str, Callable[[ShopifyClient, SQLiteDatabase], Awaitable[int]]] = {
    PRODUCT_SYNC: sync_products,
    PROFILE_SYNC: sync_shipping_profiles,
}

SYNC_LABELS = {
    PRODUCT_SYNC: "Product",
    PROFILE_SYNC: "Profile",
}


async def start_sync(db: SQLiteDatabase) -> SyncStatus:
    """
    Record the start of a sync run.

    Raises:
        SyncError: If another run is still in progress
    """
    latest = await db.get_latest_sync_status()
    if latest and latest.is_syncing:
        if datetime.utcnow() - latest.last_sync_started_at < STALE_SYNC_AFTER:
            raise SyncError("A sync is already in progress")

        logger.warning(f"Abandoning stale sync {latest.id} started at {latest.last_sync_started_at}")
        latest.is_syncing = False
        latest.overall_status = SyncState.FAILED
        latest.last_sync_completed_at = datetime.utcnow()
        await db.save_sync_status(latest)

    status = SyncStatus(
        is_syncing=True,
        overall_status=SyncState.RUNNING,
        sync_types={name: SyncTypeStatus() for name in SYNC_HANDLERS},
    )
    # Another start may have slipped in between the check above and here
    if not await db.create_sync_status_if_idle(status):
        raise SyncError("A sync is already in progress")
    logger.info(f"Sync {status.id} started")
    return status


async def run_sync(
    db: SQLiteDatabase,
    client_factory: ClientFactory,
    status: Optional[SyncStatus] = None,
) -> SyncStatus:
    """
    Run every sync type in turn, saving progress after each step.

    A failing type does not stop the ones after it.

    Raises:
        SyncError: If a run is already in progress, or once the run has
            been recorded as failed
    """
    if status is None:
        status = await start_sync(db)

    client = None
    try:
        client = client_factory()

        for name, handler in SYNC_HANDLERS.items():
            type_status = status.sync_types.setdefault(name, SyncTypeStatus())
            type_status.status = SyncState.RUNNING
            await db.save_sync_status(status)

            try:
                type_status.count = await handler(client, db)
                type_status.status = SyncState.COMPLETED
                logger.info(f"{name} completed: {type_status.count} records")
            except Exception as e:
                logger.exception(f"{name} failed")
                type_status.status = SyncState.FAILED
                type_status.error = str(e)

            await db.save_sync_status(status)

    except Exception as e:
        logger.exception("Sync could not run")
        for type_status in status.sync_types.values():
            if type_status.status in (SyncState.PENDING, SyncState.RUNNING):
                type_status.status = SyncState.FAILED
                type_status.error = str(e)

    finally:
        if client:
            await client.close()

    return await _finish(db, status)


async def _finish(db: SQLiteDatabase, status: SyncStatus) -> SyncStatus:
    failed = {
        name: type_status.error
        for name, type_status in status.sync_types.items()
        if type_status.status != SyncState.COMPLETED
    }

    status.is_syncing = False
    status.last_sync_completed_at = datetime.utcnow()
    status.overall_status = SyncState.FAILED if failed else SyncState.COMPLETED
    await db.save_sync_status(status)

    lines = [
        f"- **{name}**: {type_status.status.value} ({type_status.count})"
        for name, type_status in status.sync_types.items()
    ]
    if failed:
        lines += [f"- {name} error: {error}" for name, error in failed.items()]

    await create_notification_log(
        db,
        title="Sync failed" if failed else "Sync completed",
        markdown="\n".join(lines),
        is_success=not failed,
        notification_type="sync",
    )

    if failed:
        logger.error(f"Sync {status.id} failed: {failed}")
        raise SyncError(f"Sync failed: {', '.join(failed)}")

    logger.info(f"Sync {status.id} completed")
    return status


def _format_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC") if value else "unknown time"


def status_message(status: Optional[SyncStatus]) -> str:
    """Banner text for the latest sync run."""
    if status is None:
        return ""

    if not status.is_syncing and status.overall_status == SyncState.COMPLETED:
        return f"Sync completed at {_format_time(status.last_sync_completed_at)}"

    if status.is_syncing:
        for name, label in SYNC_LABELS.items():
            type_status = status.sync_types.get(name)
            if type_status and type_status.status == SyncState.RUNNING:
                return f"{label} sync in progress..."

    if status.overall_status == SyncState.FAILED:
        return f"Sync failed at {_format_time(status.last_sync_completed_at)}"

    return "Unknown status"


def banner_visible(status: Optional[SyncStatus]) -> bool:
    """The banner stays up until dismissed after the run's start."""
    if status is None:
        return False
    if status.user_dismissed_at is None:
        return True
    return status.user_dismissed_at < status.last_sync_started_at


async def dismiss(db: SQLiteDatabase) -> Optional[SyncStatus]:
    status = await db.get_latest_sync_status()
    if status is None:
        return None
    status.user_dismissed_at = datetime.utcnow()
    return await db.save_sync_status(status)
