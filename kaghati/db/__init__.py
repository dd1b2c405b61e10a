"""
Database package - SQLite only.
"""

from .models import (
    Store, StoreCreate, StoreUpdate, Pincode, PincodeCreate, PincodeUpdate,
    StaffMember, StaffCreate, StaffUpdate, ShippingProfile, Notification,
    NotificationLog, OrderSplit, ProductRecord, SyncStatus, SyncTypeStatus,
    RecordStatus, LogType, SyncState, SplitStatus, generate_uuid
)
from .sqlite import SQLiteDatabase

__all__ = [
    "SQLiteDatabase",
    "Store",
    "StoreCreate",
    "StoreUpdate",
    "Pincode",
    "PincodeCreate",
    "PincodeUpdate",
    "StaffMember",
    "StaffCreate",
    "StaffUpdate",
    "ShippingProfile",
    "Notification",
    "NotificationLog",
    "OrderSplit",
    "ProductRecord",
    "SyncStatus",
    "SyncTypeStatus",
    "RecordStatus",
    "LogType",
    "SyncState",
    "SplitStatus",
    "generate_uuid",
]
