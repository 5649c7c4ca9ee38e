"""Credential helpers: password hashing and bearer tokens.

Passwords are hashed with bcrypt. Access tokens are HS256 JWTs carrying the
user id (`sub`) and role; the API re-loads the user on every request so a
deleted account stops authenticating immediately.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from storerate.services.access import Role
from storerate.services.errors import AuthenticationError
from storerate.settings import get_settings


PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 16
PASSWORD_SPECIAL_CHARS = "!@#$%^&*"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded access token."""

    user_id: int
    role: Role


def check_password_policy(password: str) -> str | None:
    """Return a message describing why `password` is rejected, or None if it is acceptable.

    Policy: 8-16 characters, at least one uppercase letter and one of !@#$%^&*.
    """
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        return f"Password must be between {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters"
    if not any(c.isupper() for c in password) or not any(c in PASSWORD_SPECIAL_CHARS for c in password):
        return "Password must contain at least one uppercase letter and one special character"
    return None


def hash_password(plain: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt."""
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(plain: str, hashed: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: int, role: Role, expires_delta: timedelta | None = None) -> str:
    """Issue a signed access token."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": str(user_id),
        "role": role.value,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Validate signature and expiry, return claims.

    Raises:
        AuthenticationError: If the token is malformed, expired or tampered with.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError("Token is not valid") from e

    sub = payload.get("sub")
    role = payload.get("role")
    try:
        return TokenClaims(user_id=int(sub), role=Role(role))
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Token is not valid") from e
