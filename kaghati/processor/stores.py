"""
Store and pincode management.
"""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from ..config import settings
from ..db import SQLiteDatabase, Store, StoreCreate, StoreUpdate, Pincode, PincodeCreate, PincodeUpdate
from .coverage import validate_radius
from .hours import default_local_delivery, validate_local_delivery

logger = logging.getLogger(__name__)

_PIN_CODE = re.compile(r"^[0-9]{6}$")


def validate_pin_code(pin_code: str) -> str:
    pin_code = (pin_code or "").strip()
    if not _PIN_CODE.match(pin_code):
        raise ValueError(f"Pincode must be six digits, got {pin_code!r}")
    return pin_code


def validate_google_map(url: str) -> str:
    """Empty, or an absolute http(s) URL."""
    url = (url or "").strip()
    if not url:
        return ""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Google map link must be an http(s) URL, got {url!r}")
    return url


async def create_store(db: SQLiteDatabase, data: StoreCreate) -> Store:
    """
    Create a store with validated rings and working hours.

    Rings default to the configured radii and working hours to all days
    closed.

    Raises:
        ValueError: On invalid input or a duplicate store code
    """
    if await db.get_store_by_code(data.store_code):
        raise ValueError(f"Store code already exists: {data.store_code}")

    values = data.model_dump()
    values["google_map"] = validate_google_map(data.google_map)
    values["radius"] = validate_radius(
        data.radius if data.radius is not None else settings.default_radius_km,
        settings.default_radius_km,
    )
    values["local_delivery"] = (
        validate_local_delivery(data.local_delivery)
        if data.local_delivery is not None
        else default_local_delivery()
    )
    if data.pin_code:
        values["pin_code"] = validate_pin_code(data.pin_code)

    store = await db.create_store(Store(**values))
    logger.info(f"Created store {store.store_code} ({store.store_name})")
    return store


async def update_store(db: SQLiteDatabase, store_id: str, data: StoreUpdate) -> Optional[Store]:
    """
    Apply the fields set on data to a store.

    Returns:
        The updated store, or None if it does not exist

    Raises:
        ValueError: On invalid input or a store code taken by another store
    """
    existing = await db.get_store(store_id)
    if existing is None:
        return None

    updates = data.model_dump(exclude_unset=True)

    if updates.get("store_code") and updates["store_code"] != existing.store_code:
        other = await db.get_store_by_code(updates["store_code"])
        if other and other.id != store_id:
            raise ValueError(f"Store code already exists: {updates['store_code']}")
    if "google_map" in updates:
        updates["google_map"] = validate_google_map(updates["google_map"])
    if updates.get("radius") is not None:
        updates["radius"] = validate_radius(updates["radius"], settings.default_radius_km)
    if updates.get("local_delivery") is not None:
        updates["local_delivery"] = validate_local_delivery(updates["local_delivery"])
    if updates.get("pin_code"):
        updates["pin_code"] = validate_pin_code(updates["pin_code"])

    # None means "leave unchanged"
    updates = {key: value for key, value in updates.items() if value is not None}
    return await db.update_store(store_id, **updates)


# ===== Pincodes =====

async def create_pincode(db: SQLiteDatabase, data: PincodeCreate) -> Pincode:
    """
    Raises:
        LookupError: If the store does not exist
        ValueError: On a malformed or duplicate pincode
    """
    pin_code = validate_pin_code(data.pin_code)
    store = await db.get_store(data.store_id)
    if store is None:
        raise LookupError(f"Store not found: {data.store_id}")

    if await db.get_pincodes(store_id=store.id, pin_code=pin_code):
        raise ValueError(f"Pincode {pin_code} is already assigned to {store.store_code}")

    pincode = Pincode(pin_code=pin_code, store_id=store.id, store_code=store.store_code)
    return await db.create_pincode(pincode)


async def update_pincode(db: SQLiteDatabase, pincode_id: str, data: PincodeUpdate) -> Optional[Pincode]:
    existing = await db.get_pincode(pincode_id)
    if existing is None:
        return None

    updates = {}
    pin_code = existing.pin_code
    store_id = existing.store_id

    if data.pin_code is not None:
        pin_code = updates["pin_code"] = validate_pin_code(data.pin_code)
    if data.store_id is not None and data.store_id != existing.store_id:
        store = await db.get_store(data.store_id)
        if store is None:
            raise LookupError(f"Store not found: {data.store_id}")
        store_id = updates["store_id"] = store.id
        updates["store_code"] = store.store_code

    if updates:
        clash = [p for p in await db.get_pincodes(store_id=store_id, pin_code=pin_code) if p.id != pincode_id]
        if clash:
            raise ValueError(f"Pincode {pin_code} is already assigned to that store")

    return await db.update_pincode(pincode_id, **updates)
