"""
Authentication routes - login/logout.
"""

import asyncio
import logging
import time
from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..auth import verify_password
from ..config import settings
from ..dependencies import get_db, get_session_manager, require_auth
from ..processor.staff import authenticate_staff

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth")

# Brute force protection: track failed login attempts by IP
failed_attempts = defaultdict(list)
LOCKOUT_THRESHOLD = 5  # Lock after 5 failed attempts
LOCKOUT_DURATION = 300  # 5 minutes in seconds


class LoginRequest(BaseModel):
    password: str
    email: Optional[str] = None  # staff login; omitted for the admin password


@router.post("/login")
async def login(request: Request, body: LoginRequest):
    """Check admin or staff credentials and start a session."""
    session_manager = get_session_manager()
    client_ip = request.client.host if request.client else "unknown"
    current_time = time.time()

    failed_attempts[client_ip] = [
        attempt_time for attempt_time in failed_attempts[client_ip]
        if current_time - attempt_time < LOCKOUT_DURATION
    ]

    if len(failed_attempts[client_ip]) >= LOCKOUT_THRESHOLD:
        remaining = int(LOCKOUT_DURATION - (current_time - failed_attempts[client_ip][0]))
        raise HTTPException(
            status_code=429,
            detail=f"Too many failed attempts. Try again in {remaining} seconds.",
        )

    response = JSONResponse({"success": True})

    if body.email:
        member = await authenticate_staff(get_db(), body.email, body.password)
        if member:
            failed_attempts[client_ip] = []
            session_manager.create_session(
                response, user_id=member.id, email=member.email,
                store_access=member.store_access,
            )
            logger.info(f"Staff member {member.email} signed in")
            return response

    elif settings.admin_password_hash and verify_password(body.password, settings.admin_password_hash):
        failed_attempts[client_ip] = []
        session_manager.create_session(response)
        logger.info("Admin signed in")
        return response

    failed_attempts[client_ip].append(current_time)
    logger.warning(f"Failed login from {client_ip}")

    # Slow down brute force, more with each attempt
    await asyncio.sleep(min(len(failed_attempts[client_ip]) * 0.5, 3))

    raise HTTPException(status_code=401, detail="Invalid credentials")


@router.post("/logout")
async def logout():
    response = JSONResponse({"success": True})
    get_session_manager().clear_session(response)
    return response


@router.get("/me")
async def me(session: dict = Depends(require_auth)):
    """Current session payload."""
    return session
