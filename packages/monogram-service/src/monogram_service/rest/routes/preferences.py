"""Per-user settings endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from monogram_service.auth.deps import CurrentUserDep
from monogram_service.db.deps import UsersRepoDep
from monogram_service.rest.schemas import SettingsSchema, UpdateSettingsRequest

router = APIRouter(prefix="/me/settings", tags=["settings"])


def _settings_to_schema(row) -> SettingsSchema:
    return SettingsSchema(
        theme=row.theme,
        email_notifications=row.email_notifications,
        landing_page=row.landing_page,
        profile_visibility=row.profile_visibility,
    )


@router.get("", response_model=SettingsSchema)
async def get_settings(current_user: CurrentUserDep, repo: UsersRepoDep) -> SettingsSchema:
    return _settings_to_schema(await repo.get_settings(current_user.user_id))


@router.patch("", response_model=SettingsSchema)
async def update_settings(
    request: UpdateSettingsRequest, current_user: CurrentUserDep, repo: UsersRepoDep
) -> SettingsSchema:
    fields = request.model_dump(exclude_unset=True, exclude_none=True)
    return _settings_to_schema(await repo.update_settings(current_user.user_id, **fields))
