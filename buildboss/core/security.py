"""
Security helpers.

Password hashing, confirmation tokens and the two JWT families used by the
platform:

- user access tokens, signed with ``JWT_SECRET`` and carrying ``userId``;
- plans-admin tokens, signed with ``ADMIN_JWT_SECRET``, valid for two hours by
  default and carrying ``adminId``, ``email`` and ``type="admin"``.

Passwords are stored as bcrypt hashes (``$2b$<rounds>$...``).
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from buildboss.server.core.config import settings

BCRYPT_ROUNDS = 12
# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72
PASSWORD_MIN_LENGTH = 8

_PASSWORD_POLICY = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).+$")


class TokenError(Exception):
    """Raised when a JWT cannot be decoded or carries unexpected claims."""


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, *, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt and a random salt."""
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """Check a password against a stored hash.

    Returns ``False`` for accounts without a password (Google-only sign-in) and
    for hashes that are not bcrypt.
    """
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        return False


def password_policy_error(password: str) -> Optional[str]:
    """Return a message describing why ``password`` is too weak, or ``None``."""
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    if not _PASSWORD_POLICY.match(password):
        return "Password must contain at least one lowercase letter, one uppercase letter and one digit"
    return None


def generate_confirmation_token() -> str:
    """Random 32-byte token, hex encoded, used in e-mail confirmation links."""
    return secrets.token_hex(32)


def _encode(claims: Dict[str, Any], secret: str, expires_in: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": int(now.timestamp()), "exp": int((now + expires_in).timestamp())}
    return jwt.encode(payload, secret, algorithm=settings.security.jwt_algorithm)


def _decode(token: str, secret: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, secret, algorithms=[settings.security.jwt_algorithm])
    except JWTError as e:
        raise TokenError(str(e)) from e


def create_access_token(user_id: str, expires_in: Optional[timedelta] = None) -> str:
    """Issue a user access token."""
    security = settings.security
    return _encode(
        {"userId": user_id},
        security.jwt_secret,
        expires_in or timedelta(hours=security.jwt_expires_in_hours),
    )


def decode_access_token(token: str) -> str:
    """Validate a user access token and return the user id it was issued for.

    Raises:
        TokenError: If the token is malformed, expired or lacks ``userId``.
    """
    claims = _decode(token, settings.security.jwt_secret)
    user_id = claims.get("userId")
    if not user_id:
        raise TokenError("Token has no userId claim")
    return str(user_id)


def create_admin_token(admin_id: str, email: str, expires_in: Optional[timedelta] = None) -> str:
    """Issue a plans-admin token."""
    security = settings.security
    return _encode(
        {"adminId": admin_id, "email": email, "type": "admin"},
        security.admin_jwt_secret,
        expires_in or timedelta(hours=security.admin_jwt_expires_in_hours),
    )


def decode_admin_token(token: str) -> str:
    """Validate a plans-admin token and return the admin id.

    Raises:
        TokenError: If the token is malformed, expired or not an admin token.
    """
    claims = _decode(token, settings.security.admin_jwt_secret)
    if claims.get("type") != "admin" or not claims.get("adminId"):
        raise TokenError("Not an admin token")
    return str(claims["adminId"])
