"""
Pydantic models for database entities.
JSON-shaped fields (radius, working hours, line items) are stored as text in SQLite.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
import uuid


class RecordStatus(str, Enum):
    """Status of a store or staff member."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class LogType(str, Enum):
    """Severity of a notification log entry."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class SyncState(str, Enum):
    """State of a sync run or of one sync type within it."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SplitStatus(str, Enum):
    """Fulfilment status of an order split."""
    NEW = "new"
    CONFIRM = "confirm"
    ON_HOLD = "on_hold"
    READY_FOR_PICKUP = "ready_for_pickup"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCEL = "cancel"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


# ===== Stores =====

class Store(BaseModel):
    """A physical outlet or warehouse."""
    id: str = Field(default_factory=generate_uuid)
    store_name: str
    store_code: str
    store_tier: str = ""
    store_cluster: str = ""
    erp_store_id: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pin_code: str = ""
    mob_number: str = ""
    email: str = ""
    status: RecordStatus = RecordStatus.INACTIVE
    is_backup_warehouse: bool = False
    select_backup_warehouse: str = ""
    lat: float = 0.0
    lng: float = 0.0
    google_map: str = ""
    radius: Dict[str, int] = Field(default_factory=dict)  # km, e.g. {"R1": 3, ...}
    local_delivery: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class StoreCreate(BaseModel):
    """Input for creating a new store."""
    store_name: str
    store_code: str
    store_tier: str = ""
    store_cluster: str = ""
    erp_store_id: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pin_code: str = ""
    mob_number: str = ""
    email: str = ""
    status: RecordStatus = RecordStatus.INACTIVE
    is_backup_warehouse: bool = False
    select_backup_warehouse: str = ""
    lat: float = 0.0
    lng: float = 0.0
    google_map: str = ""
    radius: Optional[Dict[str, int]] = None
    local_delivery: Optional[Dict[str, Any]] = None


class StoreUpdate(BaseModel):
    """Input for updating a store."""
    store_name: Optional[str] = None
    store_code: Optional[str] = None
    store_tier: Optional[str] = None
    store_cluster: Optional[str] = None
    erp_store_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pin_code: Optional[str] = None
    mob_number: Optional[str] = None
    email: Optional[str] = None
    status: Optional[RecordStatus] = None
    is_backup_warehouse: Optional[bool] = None
    select_backup_warehouse: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    google_map: Optional[str] = None
    radius: Optional[Dict[str, int]] = None
    local_delivery: Optional[Dict[str, Any]] = None


# ===== Pincodes =====

class Pincode(BaseModel):
    """A postal code served by a store."""
    id: str = Field(default_factory=generate_uuid)
    pin_code: str
    store_id: str
    store_code: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class PincodeCreate(BaseModel):
    pin_code: str
    store_id: str


class PincodeUpdate(BaseModel):
    pin_code: Optional[str] = None
    store_id: Optional[str] = None


# ===== Staff =====

class StaffMember(BaseModel):
    """An admin panel user with per-store access."""
    id: str = Field(default_factory=generate_uuid)
    email: str
    first_name: str = ""
    last_name: str = ""
    role_name: str = ""
    status: RecordStatus = RecordStatus.ACTIVE
    store_access: List[str] = Field(default_factory=list)  # store codes
    store_module_access: Dict[str, bool] = Field(default_factory=dict)
    password_hash: str = Field(default="", exclude=True)
    last_signed_in: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class StaffCreate(BaseModel):
    email: str
    password: str
    first_name: str = ""
    last_name: str = ""
    role_name: str = ""
    status: RecordStatus = RecordStatus.ACTIVE
    store_access: List[str] = Field(default_factory=list)
    store_module_access: Dict[str, bool] = Field(default_factory=dict)


class StaffUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role_name: Optional[str] = None
    status: Optional[RecordStatus] = None
    store_access: Optional[List[str]] = None
    store_module_access: Optional[Dict[str, bool]] = None


# ===== Shipping profiles =====

class ShippingProfile(BaseModel):
    """Cached copy of a Shopify delivery profile."""
    delivery_profile_id: str  # Shopify DeliveryProfile GID
    profile_name: str
    shop_name: str = ""
    location_groups: List[Dict[str, Any]] = Field(default_factory=list)
    profile_items: List[str] = Field(default_factory=list)  # product GIDs
    origin_location_count: int = 0
    locations_without_rates_count: int = 0
    synced_at: datetime = Field(default_factory=datetime.utcnow)


# ===== Notifications =====

class Notification(BaseModel):
    """An order event waiting to be picked up by polling clients."""
    id: str = Field(default_factory=generate_uuid)
    event: str
    order_name: str = ""
    outlet_id: str = ""
    store_code: str = ""
    store_name: str = ""
    is_trigger: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)


class NotificationLog(BaseModel):
    """An operator-facing message about a background operation."""
    id: str = Field(default_factory=generate_uuid)
    log_type: LogType = LogType.INFO
    notification_info: str
    notification_details: str = ""  # markdown
    notification_type: str = ""
    notification_view_status: bool = False
    shop: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)


# ===== Orders =====

class OrderSplit(BaseModel):
    """The part of a Shopify order fulfilled by a single store."""
    id: str = Field(default_factory=generate_uuid)
    split_id: str  # "{order_number}-{outlet_id}"
    order_reference_id: str  # Shopify order id
    order_number: int
    store_code: str = ""
    store_name: str = ""
    erp_store_id: str = ""
    order_status: SplitStatus = SplitStatus.NEW
    on_hold_status: str = ""
    on_hold_comment: str = ""
    line_items: List[Dict[str, Any]] = Field(default_factory=list)
    time_stamp: Dict[str, int] = Field(default_factory=dict)  # status -> epoch ms
    re_assign_status: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


# ===== Catalog cache =====

class ProductRecord(BaseModel):
    """Product snapshot written by the catalog sync."""
    product_id: str  # Shopify product GID
    title: str = ""
    status: str = ""
    created_at: Optional[datetime] = None
    variants: List[Dict[str, Any]] = Field(default_factory=list)
    synced_at: datetime = Field(default_factory=datetime.utcnow)


# ===== Sync status =====

class SyncTypeStatus(BaseModel):
    status: SyncState = SyncState.PENDING
    count: int = 0
    error: Optional[str] = None


class SyncStatus(BaseModel):
    """Progress of a background sync run, polled by clients."""
    id: str = Field(default_factory=generate_uuid)
    is_syncing: bool = False
    last_sync_started_at: datetime = Field(default_factory=datetime.utcnow)
    last_sync_completed_at: Optional[datetime] = None
    overall_status: SyncState = SyncState.RUNNING
    sync_types: Dict[str, SyncTypeStatus] = Field(default_factory=dict)
    user_dismissed_at: Optional[datetime] = None
