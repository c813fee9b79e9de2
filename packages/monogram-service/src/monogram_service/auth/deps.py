"""FastAPI auth dependencies."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request

from monogram_service.auth.jwt import decode_token
from monogram_service.auth.models import CurrentUser


def user_from_token(token: str) -> CurrentUser:
    """Decode a Bearer JWT and return the CurrentUser."""
    try:
        payload = decode_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid or expired token") from exc

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Not an access token")

    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError) as exc:
        raise HTTPException(status_code=401, detail="Malformed token payload") from exc

    return CurrentUser(
        user_id=user_id,
        email=payload.get("email", ""),
        role=payload.get("role", "member"),
    )


async def get_current_user(request: Request) -> CurrentUser:
    """Resolve the current authenticated user from ``Authorization: Bearer``."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_from_token(auth_header.removeprefix("Bearer ").strip())


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
