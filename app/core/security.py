"""Password hashing and JWT creation/verification for sessions and account activation."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
# Usernames never contain "@", so a login identifier with "@" can only be an email.
USERNAME_PATTERN = r"^[^\s@]+$"
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 72
# bcrypt only reads the first 72 bytes; longer passwords are rejected, never truncated.
PASSWORD_MAX_BYTES = 72

# Claim that tells activation tokens and session tokens apart.
ACTIVATION_TOKEN_TYPE = "activation"


def password_too_long(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) > PASSWORD_MAX_BYTES


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Raises ValueError above PASSWORD_MAX_BYTES."""
    if password_too_long(plain_password):
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes.")
    pw_bytes = plain_password.encode("utf-8")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Over-long input never matches."""
    if password_too_long(plain_password):
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(sub: str | int, role: str) -> str:
    """Create a session JWT with sub (account id), role, and exp."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "role": role,
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a session JWT; return payload (sub, role, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
    )


def create_activation_token(pending: dict[str, Any]) -> str:
    """
    Sign the pending registration fields into a short-lived activation JWT.

    Signed with ACTIVATION_SECRET (not the session secret) so an activation
    token can never be replayed as a session cookie.
    """
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        **pending,
        "typ": ACTIVATION_TOKEN_TYPE,
        "exp": now + timedelta(minutes=settings.ACTIVATION_EXPIRE_MINUTES),
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.ACTIVATION_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_activation_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry of an activation JWT and return its claims.
    Raises jwt.PyJWTError on invalid, expired, or wrongly typed token.
    """
    payload = jwt.decode(
        token,
        settings.ACTIVATION_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
    )
    if payload.get("typ") != ACTIVATION_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not an activation token")
    return payload
