"""
Staff accounts with per-store access.
"""

import logging
from datetime import datetime
from typing import Optional

from ..auth import hash_password, verify_password
from ..db import SQLiteDatabase, StaffMember, StaffCreate, StaffUpdate, RecordStatus

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if "@" not in email:
        raise ValueError(f"Invalid email: {email!r}")
    return email


async def create_staff(db: SQLiteDatabase, data: StaffCreate) -> StaffMember:
    """
    Raises:
        ValueError: On an invalid or already used email, or an empty password
    """
    email = _normalize_email(data.email)
    if not data.password:
        raise ValueError("Password is required")
    if await db.get_staff_by_email(email):
        raise ValueError(f"Email already in use: {email}")

    member = StaffMember(
        **data.model_dump(exclude={"email", "password"}),
        email=email,
        password_hash=hash_password(data.password),
    )
    await db.create_staff_member(member)
    logger.info(f"Created staff member {email}")
    return member


async def update_staff(db: SQLiteDatabase, staff_id: str, data: StaffUpdate) -> Optional[StaffMember]:
    existing = await db.get_staff_member(staff_id)
    if existing is None:
        return None

    updates = {
        key: value
        for key, value in data.model_dump(exclude_unset=True, exclude={"password"}).items()
        if value is not None
    }
    if "email" in updates:
        updates["email"] = _normalize_email(updates["email"])
        other = await db.get_staff_by_email(updates["email"])
        if other and other.id != staff_id:
            raise ValueError(f"Email already in use: {updates['email']}")
    if data.password:
        updates["password_hash"] = hash_password(data.password)

    return await db.update_staff_member(staff_id, **updates)


async def authenticate_staff(db: SQLiteDatabase, email: str, password: str) -> Optional[StaffMember]:
    """Active staff member matching the credentials, with last_signed_in stamped."""
    member = await db.get_staff_by_email(email)
    if member is None or member.status != RecordStatus.ACTIVE:
        return None
    if not verify_password(password, member.password_hash):
        return None
    return await db.update_staff_member(member.id, last_signed_in=datetime.utcnow())
