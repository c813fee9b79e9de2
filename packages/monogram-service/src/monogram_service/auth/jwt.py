"""JWT creation and verification for sessions and OAuth state."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

from monogram_service.settings import settings


def _now_utc() -> datetime:
    return datetime.now(UTC)


def _encode(payload: dict, expires_delta: timedelta) -> str:
    now = _now_utc()
    payload = {**payload, "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: UUID,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(
        {"sub": str(user_id), "email": email, "role": role, "type": "access"},
        expires_delta,
    )


def create_refresh_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return _encode({"sub": str(user_id), "type": "refresh"}, expires_delta)


def create_oauth_state(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    """Signed, short-lived ``state`` for the Spotify authorize redirect.

    Binding the state to the user lets the public callback know whose tokens
    it is storing without a server-side session.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.oauth_state_expire_minutes)
    return _encode({"sub": str(user_id), "type": "oauth_state"}, expires_delta)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def decode_oauth_state(state: str) -> UUID:
    """Return the user id bound to ``state``.

    Raises jwt.PyJWTError for bad signatures or expiry, ValueError for any
    other token type or payload.
    """
    payload = decode_token(state)
    if payload.get("type") != "oauth_state":
        raise ValueError("Not an OAuth state token")
    return UUID(payload["sub"])
