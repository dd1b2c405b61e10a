"""
Password hashing with bcrypt.
"""

from passlib.hash import bcrypt


def hash_password(password: str) -> str:
    """Hash a password for storage in settings or the staff table."""
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        return False
