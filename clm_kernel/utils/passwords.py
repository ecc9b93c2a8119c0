"""
Password hashing utilities.

Clear-text passwords never reach the store: accounts persist a bcrypt hash
and login compares against it.
"""

import bcrypt


def hash_password(password: str) -> str:
    """
    Hash a clear-text password with a fresh bcrypt salt.

    Args:
        password: Clear-text password.

    Returns:
        bcrypt hash as a UTF-8 string (60 characters).
    """
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a clear-text password against a stored bcrypt hash.

    A malformed stored hash verifies as False rather than raising.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
