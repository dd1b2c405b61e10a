"""
FastAPI dependency injection.
Database, session management and the Shopify client.
"""

from typing import AsyncIterator, Optional, Set
from fastapi import Depends, Request, HTTPException

from .config import settings
from .db import SQLiteDatabase
from .auth import SessionManager, ADMIN_USER_ID
from .processor.runner import shopify_client_from_settings
from .shopify import ShopifyClient


# Global instances (initialized on startup)
_db: Optional[SQLiteDatabase] = None
_session_manager: Optional[SessionManager] = None


async def init_dependencies():
    """Initialize global dependencies. Called on app startup."""
    global _db, _session_manager

    _db = SQLiteDatabase(settings.database_path)
    await _db.initialize()

    _session_manager = SessionManager(settings.session_secret)


async def close_dependencies():
    """Close global dependencies. Called on app shutdown."""
    global _db
    if _db:
        await _db.close()
        _db = None


def get_db() -> SQLiteDatabase:
    """Get the database instance."""
    if _db is None:
        raise RuntimeError("Database not initialized")
    return _db


def get_session_manager() -> SessionManager:
    """Get the session manager instance."""
    if _session_manager is None:
        raise RuntimeError("Session manager not initialized")
    return _session_manager


async def get_shopify_client() -> AsyncIterator[ShopifyClient]:
    """Per-request Shopify client, closed when the request ends."""
    try:
        client = shopify_client_from_settings()
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))

    async with client:
        yield client


async def require_auth(request: Request) -> dict:
    """Dependency that requires a valid session."""
    session = get_session_manager().get_session(request)
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session


async def require_admin(session: dict = Depends(require_auth)) -> dict:
    """Dependency that requires the admin session."""
    if session.get("user_id") != ADMIN_USER_ID:
        raise HTTPException(status_code=403, detail="Admin access required")
    return session


async def allowed_store_codes(session: dict = Depends(require_auth)) -> Optional[Set[str]]:
    """Store codes the session may manage, or None for every store."""
    if session.get("user_id") == ADMIN_USER_ID:
        return None
    return set(session.get("store_access") or [])


def ensure_store_access(allowed: Optional[Set[str]], store_code: str) -> None:
    if allowed is not None and store_code not in allowed:
        raise HTTPException(status_code=403, detail=f"No access to store {store_code}")
