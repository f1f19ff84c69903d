"""Password hashing and signed tokens for RentFlow accounts.

Two kinds of JWT are issued, told apart by their ``type`` claim:

- ``access``: the bearer token sent with every API call.
- ``password_reset``: a short-lived token that lets its holder set a new
  password once. It carries a fingerprint of the password hash it was issued
  against, so it stops working as soon as the password changes.
"""

import hashlib
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from rentflow.config import settings
from rentflow.core.exceptions import AuthenticationError

ACCESS_TOKEN = "access"
PASSWORD_RESET_TOKEN = "password_reset"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login or current-password attempt against the stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Argon2 hash stored in ``users.password_hash``."""
    return pwd_context.hash(password)


def _encode(claims: dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    payload = {**claims, "type": token_type, "exp": datetime.now(UTC) + lifetime}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Bearer token for an account; lifetime defaults to ``access_token_expire_minutes``."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(data, ACCESS_TOKEN, lifetime)


def verify_token(token: str, token_type: str = ACCESS_TOKEN) -> dict[str, Any]:
    """Decode a token and check its signature, expiry and type.

    Raises:
        AuthenticationError: The token is malformed, expired or of another type
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")
    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def create_tokens(user_id: str, email: str, role: str) -> dict[str, str]:
    """Token payload returned by register, login and password changes."""
    token_data = {"sub": user_id, "email": email, "role": role}
    return {
        "access_token": create_access_token(token_data),
        "token_type": "bearer",
    }


def password_fingerprint(password_hash: str) -> str:
    """Short digest of a stored password hash, embedded in reset tokens."""
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


def create_password_reset_token(user_id: str, password_hash: str) -> str:
    """One-time token for ``PUT /auth/reset-password/{token}``."""
    return _encode(
        {"sub": user_id, "pwd": password_fingerprint(password_hash)},
        PASSWORD_RESET_TOKEN,
        timedelta(minutes=settings.password_reset_expire_minutes),
    )
