"""
SQLite database implementation.
Simple and direct - no abstraction layers.
"""

import aiosqlite
import json
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
import os

from .models import (
    Store, Pincode, StaffMember, ShippingProfile, Notification,
    NotificationLog, OrderSplit, ProductRecord, SyncStatus, SyncTypeStatus,
    RecordStatus, LogType, SyncState, SplitStatus
)


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO datetime, dropping timezone info to avoid comparison issues."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


def _dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class SQLiteDatabase:
    """SQLite database for all operations."""

    # Columns that hold JSON documents, per table
    STORE_JSON_FIELDS = {"radius", "local_delivery"}
    STAFF_JSON_FIELDS = {"store_access", "store_module_access"}
    SPLIT_JSON_FIELDS = {"line_items", "time_stamp"}

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    async def initialize(self) -> None:
        """Create database tables."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS stores (
                id TEXT PRIMARY KEY,
                store_name TEXT NOT NULL,
                store_code TEXT NOT NULL UNIQUE,
                store_tier TEXT NOT NULL DEFAULT '',
                store_cluster TEXT NOT NULL DEFAULT '',
                erp_store_id TEXT NOT NULL DEFAULT '',
                address TEXT NOT NULL DEFAULT '',
                city TEXT NOT NULL DEFAULT '',
                state TEXT NOT NULL DEFAULT '',
                pin_code TEXT NOT NULL DEFAULT '',
                mob_number TEXT NOT NULL DEFAULT '',
                email TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT 'Inactive',
                is_backup_warehouse INTEGER NOT NULL DEFAULT 0,
                select_backup_warehouse TEXT NOT NULL DEFAULT '',
                lat REAL NOT NULL DEFAULT 0,
                lng REAL NOT NULL DEFAULT 0,
                google_map TEXT NOT NULL DEFAULT '',
                radius TEXT NOT NULL DEFAULT '{}',
                local_delivery TEXT NOT NULL DEFAULT '{}',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS pincodes (
                id TEXT PRIMARY KEY,
                pin_code TEXT NOT NULL,
                store_id TEXT NOT NULL,
                store_code TEXT NOT NULL,
                created_at TEXT NOT NULL,
                FOREIGN KEY (store_id) REFERENCES stores(id) ON DELETE CASCADE,
                UNIQUE(pin_code, store_id)
            );

            CREATE TABLE IF NOT EXISTS staff (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                first_name TEXT NOT NULL DEFAULT '',
                last_name TEXT NOT NULL DEFAULT '',
                role_name TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT 'Active',
                store_access TEXT NOT NULL DEFAULT '[]',
                store_module_access TEXT NOT NULL DEFAULT '{}',
                password_hash TEXT NOT NULL DEFAULT '',
                last_signed_in TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS shipping_profiles (
                delivery_profile_id TEXT PRIMARY KEY,
                profile_name TEXT NOT NULL,
                shop_name TEXT NOT NULL DEFAULT '',
                location_groups TEXT NOT NULL DEFAULT '[]',
                profile_items TEXT NOT NULL DEFAULT '[]',
                origin_location_count INTEGER NOT NULL DEFAULT 0,
                locations_without_rates_count INTEGER NOT NULL DEFAULT 0,
                synced_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS notifications (
                id TEXT PRIMARY KEY,
                event TEXT NOT NULL,
                order_name TEXT NOT NULL DEFAULT '',
                outlet_id TEXT NOT NULL DEFAULT '',
                store_code TEXT NOT NULL DEFAULT '',
                store_name TEXT NOT NULL DEFAULT '',
                is_trigger INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS notification_logs (
                id TEXT PRIMARY KEY,
                log_type TEXT NOT NULL DEFAULT 'info',
                notification_info TEXT NOT NULL,
                notification_details TEXT NOT NULL DEFAULT '',
                notification_type TEXT NOT NULL DEFAULT '',
                notification_view_status INTEGER NOT NULL DEFAULT 0,
                shop TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS order_splits (
                id TEXT PRIMARY KEY,
                split_id TEXT NOT NULL,
                order_reference_id TEXT NOT NULL,
                order_number INTEGER NOT NULL,
                store_code TEXT NOT NULL DEFAULT '',
                store_name TEXT NOT NULL DEFAULT '',
                erp_store_id TEXT NOT NULL DEFAULT '',
                order_status TEXT NOT NULL DEFAULT 'new',
                on_hold_status TEXT NOT NULL DEFAULT '',
                on_hold_comment TEXT NOT NULL DEFAULT '',
                line_items TEXT NOT NULL DEFAULT '[]',
                time_stamp TEXT NOT NULL DEFAULT '{}',
                re_assign_status INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS products (
                product_id TEXT PRIMARY KEY,
                title TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT '',
                created_at TEXT,
                variants TEXT NOT NULL DEFAULT '[]',
                synced_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS sync_status (
                id TEXT PRIMARY KEY,
                is_syncing INTEGER NOT NULL DEFAULT 0,
                last_sync_started_at TEXT NOT NULL,
                last_sync_completed_at TEXT,
                overall_status TEXT NOT NULL,
                sync_types TEXT NOT NULL DEFAULT '{}',
                user_dismissed_at TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_pincodes_pin ON pincodes(pin_code);
            CREATE INDEX IF NOT EXISTS idx_pincodes_store_id ON pincodes(store_id);
            CREATE INDEX IF NOT EXISTS idx_notifications_pending ON notifications(is_trigger, created_at);
            CREATE INDEX IF NOT EXISTS idx_notification_logs_created ON notification_logs(created_at DESC);
            CREATE INDEX IF NOT EXISTS idx_order_splits_order ON order_splits(order_reference_id);
            CREATE INDEX IF NOT EXISTS idx_sync_status_started ON sync_status(last_sync_started_at DESC);
        """)
        await conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # ===== Helper Methods =====

    def _row_to_store(self, row: aiosqlite.Row) -> Store:
        """Convert a database row to a Store model."""
        return Store(
            id=row["id"],
            store_name=row["store_name"],
            store_code=row["store_code"],
            store_tier=row["store_tier"],
            store_cluster=row["store_cluster"],
            erp_store_id=row["erp_store_id"],
            address=row["address"],
            city=row["city"],
            state=row["state"],
            pin_code=row["pin_code"],
            mob_number=row["mob_number"],
            email=row["email"],
            status=RecordStatus(row["status"]),
            is_backup_warehouse=bool(row["is_backup_warehouse"]),
            select_backup_warehouse=row["select_backup_warehouse"],
            lat=row["lat"],
            lng=row["lng"],
            google_map=row["google_map"],
            radius=json.loads(row["radius"]),
            local_delivery=json.loads(row["local_delivery"]),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"])
        )

    def _row_to_pincode(self, row: aiosqlite.Row) -> Pincode:
        return Pincode(
            id=row["id"],
            pin_code=row["pin_code"],
            store_id=row["store_id"],
            store_code=row["store_code"],
            created_at=_parse_dt(row["created_at"])
        )

    def _row_to_staff(self, row: aiosqlite.Row) -> StaffMember:
        return StaffMember(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            role_name=row["role_name"],
            status=RecordStatus(row["status"]),
            store_access=json.loads(row["store_access"]),
            store_module_access=json.loads(row["store_module_access"]),
            password_hash=row["password_hash"],
            last_signed_in=_parse_dt(row["last_signed_in"]),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"])
        )

    def _row_to_profile(self, row: aiosqlite.Row) -> ShippingProfile:
        return ShippingProfile(
            delivery_profile_id=row["delivery_profile_id"],
            profile_name=row["profile_name"],
            shop_name=row["shop_name"],
            location_groups=json.loads(row["location_groups"]),
            profile_items=json.loads(row["profile_items"]),
            origin_location_count=row["origin_location_count"],
            locations_without_rates_count=row["locations_without_rates_count"],
            synced_at=_parse_dt(row["synced_at"])
        )

    def _row_to_notification(self, row: aiosqlite.Row) -> Notification:
        return Notification(
            id=row["id"],
            event=row["event"],
            order_name=row["order_name"],
            outlet_id=row["outlet_id"],
            store_code=row["store_code"],
            store_name=row["store_name"],
            is_trigger=bool(row["is_trigger"]),
            created_at=_parse_dt(row["created_at"])
        )

    def _row_to_notification_log(self, row: aiosqlite.Row) -> NotificationLog:
        return NotificationLog(
            id=row["id"],
            log_type=LogType(row["log_type"]),
            notification_info=row["notification_info"],
            notification_details=row["notification_details"],
            notification_type=row["notification_type"],
            notification_view_status=bool(row["notification_view_status"]),
            shop=row["shop"],
            created_at=_parse_dt(row["created_at"])
        )

    def _row_to_split(self, row: aiosqlite.Row) -> OrderSplit:
        return OrderSplit(
            id=row["id"],
            split_id=row["split_id"],
            order_reference_id=row["order_reference_id"],
            order_number=row["order_number"],
            store_code=row["store_code"],
            store_name=row["store_name"],
            erp_store_id=row["erp_store_id"],
            order_status=SplitStatus(row["order_status"]),
            on_hold_status=row["on_hold_status"],
            on_hold_comment=row["on_hold_comment"],
            line_items=json.loads(row["line_items"]),
            time_stamp=json.loads(row["time_stamp"]),
            re_assign_status=bool(row["re_assign_status"]),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"])
        )

    def _row_to_product(self, row: aiosqlite.Row) -> ProductRecord:
        return ProductRecord(
            product_id=row["product_id"],
            title=row["title"],
            status=row["status"],
            created_at=_parse_dt(row["created_at"]),
            variants=json.loads(row["variants"]),
            synced_at=_parse_dt(row["synced_at"])
        )

    def _row_to_sync_status(self, row: aiosqlite.Row) -> SyncStatus:
        sync_types = {
            name: SyncTypeStatus(**value)
            for name, value in json.loads(row["sync_types"]).items()
        }
        return SyncStatus(
            id=row["id"],
            is_syncing=bool(row["is_syncing"]),
            last_sync_started_at=_parse_dt(row["last_sync_started_at"]),
            last_sync_completed_at=_parse_dt(row["last_sync_completed_at"]),
            overall_status=SyncState(row["overall_status"]),
            sync_types=sync_types,
            user_dismissed_at=_parse_dt(row["user_dismissed_at"])
        )

    def _column_value(self, key: str, value: Any, json_fields: Iterable[str]) -> Any:
        """Convert a Python value to what the column stores."""
        if key in json_fields:
            return json.dumps(value)
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if hasattr(value, "value"):  # enums
            return value.value
        return value

    async def _update_row(
        self,
        table: str,
        record_id: str,
        allowed: Iterable[str],
        json_fields: Iterable[str],
        values: Dict[str, Any],
        touch: bool = True
    ) -> None:
        updates = []
        params = []

        for key, value in values.items():
            if key in allowed:
                updates.append(f"{key} = ?")
                params.append(self._column_value(key, value, json_fields))

        if touch:
            updates.append("updated_at = ?")
            params.append(datetime.utcnow().isoformat())

        if not updates:
            return

        params.append(record_id)
        conn = await self._get_connection()
        await conn.execute(f"UPDATE {table} SET {', '.join(updates)} WHERE id = ?", params)
        await conn.commit()

    # ===== Store Operations =====

    STORE_FIELDS = (
        "store_name", "store_code", "store_tier", "store_cluster", "erp_store_id",
        "address", "city", "state", "pin_code", "mob_number", "email", "status",
        "is_backup_warehouse", "select_backup_warehouse", "lat", "lng",
        "google_map", "radius", "local_delivery"
    )

    async def get_stores(self, status: Optional[RecordStatus] = None) -> List[Store]:
        conn = await self._get_connection()
        if status:
            cursor = await conn.execute(
                "SELECT * FROM stores WHERE status = ? ORDER BY store_name", (status.value,)
            )
        else:
            cursor = await conn.execute("SELECT * FROM stores ORDER BY store_name")
        rows = await cursor.fetchall()
        return [self._row_to_store(row) for row in rows]

    async def get_store(self, store_id: str) -> Optional[Store]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM stores WHERE id = ?", (store_id,))
        row = await cursor.fetchone()
        return self._row_to_store(row) if row else None

    async def get_store_by_code(self, store_code: str) -> Optional[Store]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM stores WHERE store_code = ?", (store_code,))
        row = await cursor.fetchone()
        return self._row_to_store(row) if row else None

    async def create_store(self, store: Store) -> Store:
        columns = ("id",) + self.STORE_FIELDS + ("created_at", "updated_at")
        data = store.model_dump()
        values = [
            self._column_value(column, data[column], self.STORE_JSON_FIELDS)
            for column in columns
        ]

        conn = await self._get_connection()
        await conn.execute(
            f"INSERT INTO stores ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})",
            values
        )
        await conn.commit()
        return store

    async def update_store(self, store_id: str, **kwargs) -> Optional[Store]:
        if not kwargs:
            return await self.get_store(store_id)

        if "store_code" in kwargs:
            # Pincodes carry a denormalized copy of the code
            conn = await self._get_connection()
            await conn.execute(
                "UPDATE pincodes SET store_code = ? WHERE store_id = ?",
                (kwargs["store_code"], store_id)
            )

        await self._update_row(
            "stores", store_id, self.STORE_FIELDS, self.STORE_JSON_FIELDS, kwargs
        )
        return await self.get_store(store_id)

    async def delete_store(self, store_id: str) -> bool:
        conn = await self._get_connection()
        await conn.execute("DELETE FROM pincodes WHERE store_id = ?", (store_id,))
        cursor = await conn.execute("DELETE FROM stores WHERE id = ?", (store_id,))
        await conn.commit()
        return cursor.rowcount > 0

    # ===== Pincode Operations =====

    async def get_pincodes(
        self,
        store_id: Optional[str] = None,
        pin_code: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Pincode]:
        conn = await self._get_connection()

        query = "SELECT * FROM pincodes WHERE 1=1"
        params = []

        if store_id:
            query += " AND store_id = ?"
            params.append(store_id)

        if pin_code:
            query += " AND pin_code = ?"
            params.append(pin_code)

        query += " ORDER BY pin_code, store_code LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
        return [self._row_to_pincode(row) for row in rows]

    async def get_pincode(self, pincode_id: str) -> Optional[Pincode]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM pincodes WHERE id = ?", (pincode_id,))
        row = await cursor.fetchone()
        return self._row_to_pincode(row) if row else None

    async def create_pincode(self, pincode: Pincode) -> Pincode:
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO pincodes (id, pin_code, store_id, store_code, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                pincode.id,
                pincode.pin_code,
                pincode.store_id,
                pincode.store_code,
                pincode.created_at.isoformat()
            )
        )
        await conn.commit()
        return pincode

    async def update_pincode(self, pincode_id: str, **kwargs) -> Optional[Pincode]:
        await self._update_row(
            "pincodes", pincode_id, ("pin_code", "store_id", "store_code"), (),
            kwargs, touch=False
        )
        return await self.get_pincode(pincode_id)

    async def delete_pincode(self, pincode_id: str) -> bool:
        conn = await self._get_connection()
        cursor = await conn.execute("DELETE FROM pincodes WHERE id = ?", (pincode_id,))
        await conn.commit()
        return cursor.rowcount > 0

    async def get_stores_for_pincode(self, pin_code: str) -> List[Store]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            """
            SELECT stores.* FROM stores
            JOIN pincodes ON pincodes.store_id = stores.id
            WHERE pincodes.pin_code = ?
            ORDER BY stores.store_name
            """,
            (pin_code,)
        )
        rows = await cursor.fetchall()
        return [self._row_to_store(row) for row in rows]

    # ===== Staff Operations =====

    STAFF_FIELDS = (
        "email", "first_name", "last_name", "role_name", "status",
        "store_access", "store_module_access", "password_hash", "last_signed_in"
    )

    async def get_staff_members(self) -> List[StaffMember]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM staff ORDER BY email")
        rows = await cursor.fetchall()
        return [self._row_to_staff(row) for row in rows]

    async def get_staff_member(self, staff_id: str) -> Optional[StaffMember]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM staff WHERE id = ?", (staff_id,))
        row = await cursor.fetchone()
        return self._row_to_staff(row) if row else None

    async def get_staff_by_email(self, email: str) -> Optional[StaffMember]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM staff WHERE email = ?", (email.strip().lower(),)
        )
        row = await cursor.fetchone()
        return self._row_to_staff(row) if row else None

    async def create_staff_member(self, member: StaffMember) -> StaffMember:
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO staff (id, email, first_name, last_name, role_name, status,
                               store_access, store_module_access, password_hash,
                               last_signed_in, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                member.id,
                member.email,
                member.first_name,
                member.last_name,
                member.role_name,
                member.status.value,
                json.dumps(member.store_access),
                json.dumps(member.store_module_access),
                member.password_hash,
                _dt(member.last_signed_in),
                member.created_at.isoformat(),
                member.updated_at.isoformat()
            )
        )
        await conn.commit()
        return member

    async def update_staff_member(self, staff_id: str, **kwargs) -> Optional[StaffMember]:
        if kwargs:
            await self._update_row(
                "staff", staff_id, self.STAFF_FIELDS, self.STAFF_JSON_FIELDS, kwargs
            )
        return await self.get_staff_member(staff_id)

    async def delete_staff_member(self, staff_id: str) -> bool:
        conn = await self._get_connection()
        cursor = await conn.execute("DELETE FROM staff WHERE id = ?", (staff_id,))
        await conn.commit()
        return cursor.rowcount > 0

    # ===== Shipping Profile Operations =====

    async def get_shipping_profiles(self) -> List[ShippingProfile]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM shipping_profiles ORDER BY profile_name")
        rows = await cursor.fetchall()
        return [self._row_to_profile(row) for row in rows]

    async def get_shipping_profile(self, delivery_profile_id: str) -> Optional[ShippingProfile]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM shipping_profiles WHERE delivery_profile_id = ?",
            (delivery_profile_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_profile(row) if row else None

    async def upsert_shipping_profiles(self, profiles: List[ShippingProfile]) -> None:
        if not profiles:
            return

        conn = await self._get_connection()

        for profile in profiles:
            await conn.execute(
                """
                INSERT INTO shipping_profiles (delivery_profile_id, profile_name, shop_name,
                                               location_groups, profile_items,
                                               origin_location_count,
                                               locations_without_rates_count, synced_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(delivery_profile_id) DO UPDATE SET
                    profile_name = excluded.profile_name,
                    shop_name = excluded.shop_name,
                    location_groups = excluded.location_groups,
                    profile_items = excluded.profile_items,
                    origin_location_count = excluded.origin_location_count,
                    locations_without_rates_count = excluded.locations_without_rates_count,
                    synced_at = excluded.synced_at
                """,
                (
                    profile.delivery_profile_id,
                    profile.profile_name,
                    profile.shop_name,
                    json.dumps(profile.location_groups),
                    json.dumps(profile.profile_items),
                    profile.origin_location_count,
                    profile.locations_without_rates_count,
                    profile.synced_at.isoformat()
                )
            )

        await conn.commit()

    async def delete_shipping_profiles_except(self, keep_ids: Iterable[str]) -> int:
        keep = list(keep_ids)
        conn = await self._get_connection()
        if keep:
            placeholders = ", ".join("?" for _ in keep)
            cursor = await conn.execute(
                f"DELETE FROM shipping_profiles WHERE delivery_profile_id NOT IN ({placeholders})",
                keep
            )
        else:
            cursor = await conn.execute("DELETE FROM shipping_profiles")
        await conn.commit()
        return cursor.rowcount

    # ===== Notification Operations =====

    async def create_notification(self, notification: Notification) -> Notification:
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO notifications (id, event, order_name, outlet_id, store_code,
                                       store_name, is_trigger, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                notification.id,
                notification.event,
                notification.order_name,
                notification.outlet_id,
                notification.store_code,
                notification.store_name,
                int(notification.is_trigger),
                notification.created_at.isoformat()
            )
        )
        await conn.commit()
        return notification

    async def get_notifications(
        self,
        pending_only: bool = False,
        store_code: Optional[str] = None,
        limit: int = 50
    ) -> List[Notification]:
        conn = await self._get_connection()

        query = "SELECT * FROM notifications WHERE 1=1"
        params = []

        if pending_only:
            query += " AND is_trigger = 0"

        if store_code:
            query += " AND store_code = ?"
            params.append(store_code)

        query += " ORDER BY created_at LIMIT ?"
        params.append(limit)

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
        return [self._row_to_notification(row) for row in rows]

    async def mark_notifications_triggered(self, notification_ids: List[str]) -> int:
        if not notification_ids:
            return 0

        placeholders = ", ".join("?" for _ in notification_ids)
        conn = await self._get_connection()
        cursor = await conn.execute(
            f"UPDATE notifications SET is_trigger = 1 WHERE id IN ({placeholders})",
            notification_ids
        )
        await conn.commit()
        return cursor.rowcount

    async def create_notification_log(self, log: NotificationLog) -> NotificationLog:
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO notification_logs (id, log_type, notification_info,
                                           notification_details, notification_type,
                                           notification_view_status, shop, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                log.id,
                log.log_type.value,
                log.notification_info,
                log.notification_details,
                log.notification_type,
                int(log.notification_view_status),
                log.shop,
                log.created_at.isoformat()
            )
        )
        await conn.commit()
        return log

    async def get_notification_logs(
        self,
        log_type: Optional[LogType] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[NotificationLog]:
        conn = await self._get_connection()

        query = "SELECT * FROM notification_logs WHERE 1=1"
        params = []

        if log_type:
            query += " AND log_type = ?"
            params.append(log_type.value)

        query += " ORDER BY created_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
        return [self._row_to_notification_log(row) for row in rows]

    async def clear_notification_log_flag(self, log_id: str) -> bool:
        """Mark a log entry as reviewed (notification_view_status = 0)."""
        conn = await self._get_connection()
        cursor = await conn.execute(
            "UPDATE notification_logs SET notification_view_status = 0 WHERE id = ?",
            (log_id,)
        )
        await conn.commit()
        return cursor.rowcount > 0

    # ===== Order Split Operations =====

    SPLIT_FIELDS = (
        "split_id", "store_code", "store_name", "erp_store_id", "order_status",
        "on_hold_status", "on_hold_comment", "line_items", "time_stamp",
        "re_assign_status"
    )

    async def create_order_split(self, split: OrderSplit) -> OrderSplit:
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO order_splits (id, split_id, order_reference_id, order_number,
                                      store_code, store_name, erp_store_id, order_status,
                                      on_hold_status, on_hold_comment, line_items,
                                      time_stamp, re_assign_status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                split.id,
                split.split_id,
                split.order_reference_id,
                split.order_number,
                split.store_code,
                split.store_name,
                split.erp_store_id,
                split.order_status.value,
                split.on_hold_status,
                split.on_hold_comment,
                json.dumps(split.line_items),
                json.dumps(split.time_stamp),
                int(split.re_assign_status),
                split.created_at.isoformat(),
                split.updated_at.isoformat()
            )
        )
        await conn.commit()
        return split

    async def get_order_split(self, split_id: str) -> Optional[OrderSplit]:
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT * FROM order_splits WHERE id = ?", (split_id,))
        row = await cursor.fetchone()
        return self._row_to_split(row) if row else None

    async def get_order_splits(self, order_reference_id: str) -> List[OrderSplit]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM order_splits WHERE order_reference_id = ? ORDER BY split_id",
            (order_reference_id,)
        )
        rows = await cursor.fetchall()
        return [self._row_to_split(row) for row in rows]

    async def update_order_split(self, split_id: str, /, **kwargs) -> Optional[OrderSplit]:
        if kwargs:
            await self._update_row(
                "order_splits", split_id, self.SPLIT_FIELDS, self.SPLIT_JSON_FIELDS, kwargs
            )
        return await self.get_order_split(split_id)

    # ===== Product Cache Operations =====

    async def replace_products(self, products: List[ProductRecord]) -> int:
        conn = await self._get_connection()
        await conn.execute("DELETE FROM products")

        for product in products:
            await conn.execute(
                """
                INSERT INTO products (product_id, title, status, created_at, variants, synced_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    product.product_id,
                    product.title,
                    product.status,
                    _dt(product.created_at),
                    json.dumps(product.variants),
                    product.synced_at.isoformat()
                )
            )

        await conn.commit()
        return len(products)

    async def get_products(self, limit: int = 50, offset: int = 0) -> List[ProductRecord]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM products ORDER BY title LIMIT ? OFFSET ?", (limit, offset)
        )
        rows = await cursor.fetchall()
        return [self._row_to_product(row) for row in rows]

    # ===== Sync Status Operations =====

    def _sync_status_values(self, status: SyncStatus) -> tuple:
        return (
            status.id,
            int(status.is_syncing),
            status.last_sync_started_at.isoformat(),
            _dt(status.last_sync_completed_at),
            status.overall_status.value,
            json.dumps({k: v.model_dump(mode="json") for k, v in status.sync_types.items()}),
            _dt(status.user_dismissed_at)
        )

    async def create_sync_status(self, status: SyncStatus) -> SyncStatus:
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO sync_status (id, is_syncing, last_sync_started_at,
                                     last_sync_completed_at, overall_status,
                                     sync_types, user_dismissed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            self._sync_status_values(status)
        )
        await conn.commit()
        return status

    async def create_sync_status_if_idle(self, status: SyncStatus) -> bool:
        """Insert the status only when no other run is marked as syncing."""
        conn = await self._get_connection()
        cursor = await conn.execute(
            """
            INSERT INTO sync_status (id, is_syncing, last_sync_started_at,
                                     last_sync_completed_at, overall_status,
                                     sync_types, user_dismissed_at)
            SELECT ?, ?, ?, ?, ?, ?, ?
            WHERE NOT EXISTS (SELECT 1 FROM sync_status WHERE is_syncing = 1)
            """,
            self._sync_status_values(status)
        )
        await conn.commit()
        return cursor.rowcount == 1

    async def save_sync_status(self, status: SyncStatus) -> SyncStatus:
        conn = await self._get_connection()
        await conn.execute(
            """
            UPDATE sync_status SET is_syncing = ?, last_sync_completed_at = ?,
                                   overall_status = ?, sync_types = ?, user_dismissed_at = ?
            WHERE id = ?
            """,
            (
                int(status.is_syncing),
                _dt(status.last_sync_completed_at),
                status.overall_status.value,
                json.dumps({k: v.model_dump(mode="json") for k, v in status.sync_types.items()}),
                _dt(status.user_dismissed_at),
                status.id
            )
        )
        await conn.commit()
        return status

    async def get_latest_sync_status(self) -> Optional[SyncStatus]:
        conn = await self._get_connection()
        cursor = await conn.execute(
            "SELECT * FROM sync_status ORDER BY last_sync_started_at DESC LIMIT 1"
        )
        row = await cursor.fetchone()
        return self._row_to_sync_status(row) if row else None
