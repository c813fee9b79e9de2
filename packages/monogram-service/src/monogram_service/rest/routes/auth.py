"""Auth endpoints: register, login, refresh, /me."""

from __future__ import annotations

from uuid import UUID

import jwt
import structlog
from fastapi import APIRouter, HTTPException

from monogram_service.auth.deps import CurrentUserDep
from monogram_service.auth.jwt import create_access_token, create_refresh_token, decode_token
from monogram_service.auth.passwords import verify_password
from monogram_service.db.deps import UsersRepoDep
from monogram_service.rest.schemas import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserSchema,
)

router = APIRouter(prefix="/auth", tags=["auth"])
log = structlog.get_logger(__name__)


def _user_to_schema(user) -> UserSchema:
    return UserSchema(
        id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role,
        avatar_url=user.avatar_url,
        current_streak=user.current_streak or 0,
        longest_streak=user.longest_streak or 0,
        spotify_connected=bool(user.spotify_access_token),
        created_at=user.created_at,
    )


def _issue_tokens(user) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user_id=user.id, email=user.email, role=user.role),
        refresh_token=create_refresh_token(user_id=user.id),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(request: RegisterRequest, repo: UsersRepoDep) -> TokenResponse:
    """Create a new user, returning JWT tokens."""
    if await repo.get_by_email(request.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await repo.create_user(
        email=request.email,
        password=request.password,
        name=request.name,
        role=request.role.value,
    )
    return _issue_tokens(user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, repo: UsersRepoDep) -> TokenResponse:
    """Verify credentials and return JWT tokens."""
    user = await repo.get_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        log.info("login_failed")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _issue_tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest, repo: UsersRepoDep) -> TokenResponse:
    """Exchange a refresh token for a fresh pair carrying the current role."""
    try:
        payload = decode_token(request.refresh_token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Not a refresh token")

    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Malformed token payload")

    user = await repo.get(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return _issue_tokens(user)


@router.get("/me", response_model=UserSchema)
async def me(current_user: CurrentUserDep, repo: UsersRepoDep) -> UserSchema:
    user = await repo.get(current_user.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_to_schema(user)


@router.patch("/me", response_model=UserSchema)
async def update_me(
    request: UpdateProfileRequest, current_user: CurrentUserDep, repo: UsersRepoDep
) -> UserSchema:
    """Edit name, avatar or role. New tokens are needed for a role change to apply."""
    fields = request.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    user = await repo.update_profile(current_user.user_id, **fields)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_to_schema(user)
