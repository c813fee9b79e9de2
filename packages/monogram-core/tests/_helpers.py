"""Shared test helpers - importable from test modules."""

from __future__ import annotations

from collections.abc import Iterable

from monogram.permissions import PermissionSpace, PermissionUser, UserRole


def make_user(user_id: str = "user-1", role: UserRole = UserRole.MEMBER) -> PermissionUser:
    return PermissionUser(id=user_id, role=role, name=user_id.title(), email=f"{user_id}@example.com")


def make_space(
    created_by: str | None = None,
    curators: Iterable[str] = (),
    members: Iterable[str] = (),
    space_id: str = "space-1",
) -> PermissionSpace:
    return PermissionSpace(
        id=space_id,
        name="Sunday Letters",
        created_by=created_by,
        curators=frozenset(curators),
        members=frozenset(members),
    )
