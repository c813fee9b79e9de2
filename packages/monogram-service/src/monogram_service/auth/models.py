"""Auth domain models."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from monogram.permissions import PermissionUser, UserRole


@dataclass(frozen=True)
class CurrentUser:
    user_id: UUID
    email: str
    role: str  # "leader" | "curator" | "member"

    def as_permission_user(self, role: UserRole | None = None) -> PermissionUser:
        """Permission view of this user, optionally with a per-space role."""
        return PermissionUser(
            id=str(self.user_id),
            role=role or UserRole(self.role),
            email=self.email,
        )
