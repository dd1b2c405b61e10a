"""
Runner for executing a sync in the background or from cron.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import settings
from ..db import SQLiteDatabase, SyncStatus
from ..shopify import ShopifyClient
from .sync import run_sync, SyncError

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of a sync run."""
    status: Optional[SyncStatus]
    error: Optional[str]

    @property
    def success(self) -> bool:
        return self.error is None


def shopify_client_from_settings() -> ShopifyClient:
    if not settings.shopify_shop_domain or not settings.shopify_access_token:
        raise ValueError("Shopify shop domain and access token must be configured")
    return ShopifyClient(
        settings.shopify_shop_domain,
        settings.shopify_access_token,
        settings.shopify_api_version,
    )


async def run_sync_safely(
    db: SQLiteDatabase,
    status: Optional[SyncStatus] = None,
    client_factory=shopify_client_from_settings,
) -> SyncResult:
    """Run a sync with error handling, for callers that cannot raise."""
    try:
        result = await run_sync(db, client_factory, status)
        return SyncResult(status=result, error=None)
    except SyncError as e:
        logger.error(f"Sync failed: {e}")
        return SyncResult(status=await db.get_latest_sync_status(), error=str(e))
    except Exception as e:
        logger.exception("Unexpected error during sync")
        return SyncResult(status=None, error=f"Unexpected error: {e}")
