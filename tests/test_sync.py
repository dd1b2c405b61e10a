"""
Tests for the catalog/profile sync and its status record.
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from kaghati.db import LogType, SyncState, SyncStatus, SyncTypeStatus
from kaghati.processor.sync import (
    banner_visible,
    dismiss,
    run_sync,
    start_sync,
    status_message,
    BulkOperationsManager,
    SyncError,
)
from kaghati.shopify import ParsedProduct, ShopifyClientError
from kaghati.shopify.queries import DELIVERY_PROFILES_QUERY

from conftest import FakeShopifyClient


PROFILES = {
    "shop": {"name": "Kaghati"},
    "deliveryProfiles": {"edges": [{"node": {"id": "gid://shopify/DeliveryProfile/1", "name": "General"}}]},
}


@pytest.fixture
def catalog(monkeypatch):
    """Replace the bulk product export with two canned products."""
    products = [
        ParsedProduct(
            product_id="gid://shopify/Product/1",
            title="Notebook",
            status="ACTIVE",
            created_at=datetime(2024, 1, 1),
            variants=[{"id": "gid://shopify/ProductVariant/11", "price": "150.00"}],
        ),
        ParsedProduct(
            product_id="gid://shopify/Product/2",
            title="Pen",
            status="ACTIVE",
            created_at=datetime(2024, 2, 1),
            variants=[],
        ),
    ]

    async def fetch_products(self):
        return products

    monkeypatch.setattr(BulkOperationsManager, "fetch_products", fetch_products)
    return products


class TestRunSync:
    """Tests for run_sync."""

    def test_successful_sync(self, run_with_db, catalog):
        client = FakeShopifyClient({DELIVERY_PROFILES_QUERY: PROFILES})

        async def scenario(db):
            status = await run_sync(db, lambda: client)
            return (
                status,
                await db.get_latest_sync_status(),
                await db.get_products(),
                await db.get_notification_logs(),
            )

        status, stored, products, logs = run_with_db(scenario)

        assert status.overall_status == SyncState.COMPLETED
        assert status.is_syncing is False
        assert stored.id == status.id
        assert stored.sync_types["productSync"].count == 2
        assert stored.sync_types["profileSync"].count == 1
        assert stored.last_sync_completed_at is not None
        assert [p.title for p in products] == ["Notebook", "Pen"]

        assert logs[0].log_type == LogType.INFO
        assert logs[0].notification_view_status is False

    def test_failed_type_fails_the_run(self, run_with_db, catalog):
        client = FakeShopifyClient({DELIVERY_PROFILES_QUERY: ShopifyClientError("GraphQL errors: boom")})

        async def scenario(db):
            with pytest.raises(SyncError):
                await run_sync(db, lambda: client)
            return await db.get_latest_sync_status(), await db.get_notification_logs()

        stored, logs = run_with_db(scenario)

        assert stored.overall_status == SyncState.FAILED
        assert stored.is_syncing is False
        assert stored.sync_types["productSync"].status == SyncState.COMPLETED
        assert stored.sync_types["profileSync"].status == SyncState.FAILED
        assert "boom" in stored.sync_types["profileSync"].error

        assert logs[0].log_type == LogType.ERROR
        assert logs[0].notification_view_status is True

    def test_client_that_cannot_be_built_fails_every_type(self, run_with_db):
        def factory():
            raise ValueError("Shopify shop domain and access token must be configured")

        async def scenario(db):
            with pytest.raises(SyncError):
                await run_sync(db, factory)
            return await db.get_latest_sync_status()

        stored = run_with_db(scenario)

        assert all(t.status == SyncState.FAILED for t in stored.sync_types.values())


class TestStartSync:
    """Tests for start_sync."""

    def test_second_start_is_refused(self, run_with_db):
        async def scenario(db):
            await start_sync(db)
            await start_sync(db)

        with pytest.raises(SyncError):
            run_with_db(scenario)

    def test_concurrent_starts_only_one_wins(self, run_with_db):
        async def scenario(db):
            return await asyncio.gather(start_sync(db), start_sync(db), return_exceptions=True)

        results = run_with_db(scenario)

        assert sum(isinstance(r, SyncStatus) for r in results) == 1
        assert sum(isinstance(r, SyncError) for r in results) == 1

    def test_new_status_has_pending_types(self, run_with_db):
        status = run_with_db(start_sync)

        assert status.is_syncing is True
        assert status.overall_status == SyncState.RUNNING
        assert set(status.sync_types) == {"productSync", "profileSync"}
        assert all(t.status == SyncState.PENDING for t in status.sync_types.values())

    def test_stale_run_is_abandoned(self, run_with_db):
        async def scenario(db):
            stale = SyncStatus(
                is_syncing=True,
                last_sync_started_at=datetime.utcnow() - timedelta(hours=3),
            )
            await db.create_sync_status(stale)
            return stale, await start_sync(db)

        stale, status = run_with_db(scenario)

        assert status.id != stale.id
        assert status.is_syncing is True


class TestStatusMessage:
    """Tests for status_message."""

    def make_status(self, is_syncing, overall, product=SyncState.PENDING, profile=SyncState.PENDING):
        return SyncStatus(
            is_syncing=is_syncing,
            overall_status=overall,
            last_sync_completed_at=datetime(2024, 5, 1, 10, 30),
            sync_types={
                "productSync": SyncTypeStatus(status=product),
                "profileSync": SyncTypeStatus(status=profile),
            },
        )

    def test_no_status(self):
        assert status_message(None) == ""

    def test_completed(self):
        status = self.make_status(False, SyncState.COMPLETED)
        assert status_message(status) == "Sync completed at 2024-05-01 10:30:00 UTC"

    def test_product_sync_running(self):
        status = self.make_status(True, SyncState.RUNNING, product=SyncState.RUNNING)
        assert status_message(status) == "Product sync in progress..."

    def test_profile_sync_running(self):
        status = self.make_status(
            True, SyncState.RUNNING, product=SyncState.COMPLETED, profile=SyncState.RUNNING
        )
        assert status_message(status) == "Profile sync in progress..."

    def test_failed(self):
        status = self.make_status(False, SyncState.FAILED)
        assert status_message(status) == "Sync failed at 2024-05-01 10:30:00 UTC"

    def test_between_steps_is_unknown(self):
        status = self.make_status(True, SyncState.RUNNING, product=SyncState.COMPLETED)
        assert status_message(status) == "Unknown status"


class TestBanner:
    """Tests for banner_visible and dismiss."""

    def test_visible_until_dismissed(self, run_with_db):
        async def scenario(db):
            status = await start_sync(db)
            before = banner_visible(status)
            await dismiss(db)
            return before, banner_visible(await db.get_latest_sync_status())

        before, after = run_with_db(scenario)

        assert before is True
        assert after is False

    def test_dismiss_without_sync(self, run_with_db):
        assert run_with_db(dismiss) is None

    def test_old_dismissal_does_not_hide_new_run(self):
        status = SyncStatus(user_dismissed_at=datetime.utcnow() - timedelta(days=1))
        assert banner_visible(status) is True
