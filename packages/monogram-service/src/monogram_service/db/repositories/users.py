"""Repository for users, their settings and linked Spotify accounts."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monogram.spotify import SpotifyTokens
from monogram_service.auth.passwords import hash_password
from monogram_service.db.models import UserModel, UserSettingsModel

log = structlog.get_logger(__name__)

PROFILE_FIELDS = frozenset({"name", "avatar_url", "role"})
SETTINGS_FIELDS = frozenset({"theme", "email_notifications", "landing_page", "profile_visibility"})


class UsersRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_user(
        self, email: str, password: str, name: str, role: str = "member"
    ) -> UserModel:
        """Create a new user with a bcrypt-hashed password."""
        user = UserModel(
            email=email,
            password_hash=hash_password(password),
            name=name,
            role=role,
        )
        self._session.add(user)
        await self._session.commit()
        await self._session.refresh(user)
        log.info("user_created", user_id=str(user.id), role=role)
        return user

    async def get(self, user_id: UUID) -> UserModel | None:
        return await self._session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> UserModel | None:
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalars().first()

    async def update_profile(self, user_id: UUID, **fields: Any) -> UserModel | None:
        user = await self.get(user_id)
        if user:
            for key, value in fields.items():
                if key in PROFILE_FIELDS:
                    setattr(user, key, value)
            await self._session.commit()
            await self._session.refresh(user)
        return user

    # -- settings ------------------------------------------------------------

    async def get_settings(self, user_id: UUID) -> UserSettingsModel:
        """Return the user's settings row, creating defaults on first access."""
        user_settings = await self._session.get(UserSettingsModel, user_id)
        if user_settings is None:
            user_settings = UserSettingsModel(user_id=user_id)
            self._session.add(user_settings)
            await self._session.commit()
            await self._session.refresh(user_settings)
        return user_settings

    async def update_settings(self, user_id: UUID, **fields: Any) -> UserSettingsModel:
        user_settings = await self.get_settings(user_id)
        for key, value in fields.items():
            if key in SETTINGS_FIELDS:
                setattr(user_settings, key, value)
        await self._session.commit()
        await self._session.refresh(user_settings)
        return user_settings

    # -- spotify -------------------------------------------------------------

    async def get_spotify_tokens(self, user_id: UUID) -> SpotifyTokens | None:
        user = await self.get(user_id)
        if not user or not user.spotify_access_token:
            return None
        return SpotifyTokens(
            access_token=user.spotify_access_token,
            refresh_token=user.spotify_refresh_token or "",
            expires_at=user.spotify_token_expires_at,
        )

    async def save_spotify_tokens(self, user_id: UUID, tokens: SpotifyTokens) -> None:
        user = await self.get(user_id)
        if user is None:
            raise LookupError(f"User {user_id} not found")
        user.spotify_access_token = tokens.access_token
        user.spotify_refresh_token = tokens.refresh_token
        user.spotify_token_expires_at = tokens.expires_at
        await self._session.commit()

    async def clear_spotify_tokens(self, user_id: UUID) -> None:
        user = await self.get(user_id)
        if user:
            user.spotify_access_token = None
            user.spotify_refresh_token = None
            user.spotify_token_expires_at = None
            await self._session.commit()
            log.info("spotify_disconnected", user_id=str(user_id))
