"""
Password hashing.

bcrypt only looks at the first 72 bytes of its input (and bcrypt >= 5.0
rejects longer input), so passwords are pre-hashed with SHA-256 first.
"""

import base64
import hashlib

import bcrypt


def _prepare_password(password: str) -> bytes:
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(_prepare_password(password), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_prepare_password(password), password_hash.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
