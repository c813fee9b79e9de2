"""Per-request space context.

Immutable object carrying the requested space and the caller's standing in
it. Resolved once per request by :func:`resolve_space` and handed to route
handlers, which ask it for permission decisions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException

from monogram.permissions import (
    Capability,
    PermissionSpace,
    PermissionUser,
    UserRole,
    get_permission_message,
    has_permission,
)
from monogram_service.auth.deps import CurrentUserDep
from monogram_service.auth.models import CurrentUser
from monogram_service.db.deps import SpacesRepoDep
from monogram_service.db.models import AccessType, MembershipRole


def effective_role(user_id: UUID, space: Any, membership: Any | None) -> UserRole:
    """Role of ``user_id`` inside ``space``.

    The creator leads; a CURATOR member or this week's curator curates;
    everyone else is a member.
    """
    if space.leader_id == user_id:
        return UserRole.LEADER
    if space.current_curator_id == user_id:
        return UserRole.CURATOR
    if membership is not None and membership.role == MembershipRole.CURATOR.value:
        return UserRole.CURATOR
    return UserRole.MEMBER


def permission_space(space: Any, memberships: Sequence[Any]) -> PermissionSpace:
    curators = {
        str(m.user_id) for m in memberships if m.role == MembershipRole.CURATOR.value
    }
    if space.current_curator_id is not None:
        curators.add(str(space.current_curator_id))
    return PermissionSpace(
        id=str(space.id),
        name=space.name,
        created_by=str(space.leader_id),
        curators=frozenset(curators),
        members=frozenset(str(m.user_id) for m in memberships),
    )


@dataclass(frozen=True)
class SpaceContext:
    """Resolved per-request. Immutable for the duration of the request."""
    current_user: CurrentUser
    space: Any
    membership: Any | None
    user: PermissionUser
    permissions: PermissionSpace

    @property
    def space_id(self) -> UUID:
        return self.space.id

    @property
    def role(self) -> UserRole:
        return self.user.role

    @property
    def is_member(self) -> bool:
        return self.membership is not None

    def can(self, capability: Capability) -> bool:
        return has_permission(capability, self.user, self.permissions)

    def require(self, capability: Capability) -> None:
        """Raise 403 with the capability's denial message unless allowed."""
        if not self.can(capability):
            raise HTTPException(status_code=403, detail=get_permission_message(capability))


async def resolve_space(
    space_id: UUID, current_user: CurrentUserDep, repo: SpacesRepoDep
) -> SpaceContext:
    space = await repo.get_space(space_id)
    if space is None:
        raise HTTPException(status_code=404, detail="Space not found")

    memberships = await repo.list_members(space_id)
    membership = next((m for m in memberships if m.user_id == current_user.user_id), None)
    return SpaceContext(
        current_user=current_user,
        space=space,
        membership=membership,
        user=current_user.as_permission_user(
            effective_role(current_user.user_id, space, membership)
        ),
        permissions=permission_space(space, memberships),
    )


SpaceContextDep = Annotated[SpaceContext, Depends(resolve_space)]


def is_private(space: Any) -> bool:
    return space.access_type == AccessType.PRIVATE.value
