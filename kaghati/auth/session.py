"""
Cookie-based admin session management.
"""

from datetime import datetime
from typing import Optional

from fastapi import Request, Response
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired


SESSION_MAX_AGE = 24 * 60 * 60  # seconds
SESSION_COOKIE_NAME = "session"
ADMIN_USER_ID = "admin"


class SessionManager:
    """Signs and reads the session cookie of the admin panel."""

    def __init__(self, secret_key: str, secure_cookies: bool = False):
        self._serializer = URLSafeTimedSerializer(secret_key, salt="kaghati-session")
        self._secure = secure_cookies

    def create_session(
        self,
        response: Response,
        user_id: str = ADMIN_USER_ID,
        email: str = "",
        store_access: Optional[list] = None,
    ) -> dict:
        """
        Sign a new session and set it as a cookie on the response.

        Args:
            response: Outgoing response
            user_id: "admin" for the shared admin password, otherwise a staff id
            email: Staff email, empty for the admin
            store_access: Store codes a staff member may manage

        Returns:
            The session payload
        """
        session_data = {
            "user_id": user_id,
            "email": email,
            "store_access": store_access or [],
            "created_at": datetime.utcnow().isoformat(),
        }

        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=self._serializer.dumps(session_data),
            max_age=SESSION_MAX_AGE,
            httponly=True,
            samesite="lax",
            secure=self._secure,
        )
        return session_data

    def get_session(self, request: Request) -> Optional[dict]:
        """Session payload of the request, or None if missing, forged or expired."""
        token = request.cookies.get(SESSION_COOKIE_NAME)
        if not token:
            return None

        try:
            return self._serializer.loads(token, max_age=SESSION_MAX_AGE)
        except (BadSignature, SignatureExpired):
            return None

    def clear_session(self, response: Response) -> None:
        response.delete_cookie(
            key=SESSION_COOKIE_NAME,
            httponly=True,
            samesite="lax",
        )
