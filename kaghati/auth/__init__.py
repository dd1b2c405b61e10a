"""
Authentication module.
"""

from kaghati.auth.password import hash_password, verify_password
from kaghati.auth.session import SessionManager, ADMIN_USER_ID, SESSION_COOKIE_NAME

__all__ = [
    "hash_password",
    "verify_password",
    "SessionManager",
    "ADMIN_USER_ID",
    "SESSION_COOKIE_NAME",
]
