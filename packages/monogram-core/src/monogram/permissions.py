"""Role-based permission table for spaces.

Every rule is a pure function of ``(user, space)``. Callers build the
:class:`PermissionUser` / :class:`PermissionSpace` views from whatever storage
they use and ask :func:`has_permission`; nothing here touches the database.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class UserRole(str, Enum):
    LEADER = "leader"
    CURATOR = "curator"
    MEMBER = "member"


class Capability(str, Enum):
    """Closed set of actions that can be gated.

    The values are the keys used by the web client, so string lookups keep
    working (``Capability("canManageMembers")``).
    """
    CREATE_SPACE = "canCreateSpace"
    EDIT_SPACE = "canEditSpace"
    MANAGE_MEMBERS = "canManageMembers"
    SET_QUESTIONS = "canSetQuestions"
    DELETE_SPACE = "canDeleteSpace"
    MODERATE_CONTENT = "canModerateContent"
    SUBMIT_RESPONSE = "canSubmitResponse"
    VIEW_SPACE = "canViewSpace"
    PROMOTE_TO_CURATOR = "canPromoteToCurator"
    ACCESS_SETTINGS = "canAccessSettings"


@dataclass(frozen=True)
class PermissionUser:
    id: str
    role: UserRole
    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class PermissionSpace:
    id: str = ""
    name: str = ""
    created_by: str | None = None
    curators: frozenset[str] = field(default_factory=frozenset)
    members: frozenset[str] = field(default_factory=frozenset)


# An empty space: no creator, no curators, no members.
NO_SPACE = PermissionSpace()

Rule = Callable[[PermissionUser, PermissionSpace], bool]


def _is_leader(user: PermissionUser, space: PermissionSpace) -> bool:
    return user.role == UserRole.LEADER


def _is_creating_leader(user: PermissionUser, space: PermissionSpace) -> bool:
    return user.role == UserRole.LEADER and space.created_by == user.id


def _is_leader_or_listed_curator(user: PermissionUser, space: PermissionSpace) -> bool:
    if user.role == UserRole.LEADER:
        return True
    return user.role == UserRole.CURATOR and user.id in space.curators


def _is_member(user: PermissionUser, space: PermissionSpace) -> bool:
    return user.id in space.members


RULES: dict[Capability, Rule] = {
    Capability.CREATE_SPACE: _is_leader,
    Capability.EDIT_SPACE: _is_leader_or_listed_curator,
    Capability.MANAGE_MEMBERS: _is_creating_leader,
    Capability.SET_QUESTIONS: _is_leader_or_listed_curator,
    Capability.DELETE_SPACE: _is_creating_leader,
    Capability.MODERATE_CONTENT: _is_leader_or_listed_curator,
    Capability.SUBMIT_RESPONSE: _is_member,
    Capability.VIEW_SPACE: _is_member,
    Capability.PROMOTE_TO_CURATOR: _is_creating_leader,
    Capability.ACCESS_SETTINGS: _is_creating_leader,
}

MESSAGES: dict[Capability, str] = {
    Capability.CREATE_SPACE: "Only leaders can create new spaces",
    Capability.EDIT_SPACE: "Only leaders and curators can edit this space",
    Capability.MANAGE_MEMBERS: "Only leaders can manage members",
    Capability.SET_QUESTIONS: "Only leaders and curators can set questions",
    Capability.DELETE_SPACE: "Only leaders can delete spaces",
    Capability.MODERATE_CONTENT: "Only leaders and curators can moderate content",
    Capability.SUBMIT_RESPONSE: "You must be a member of this space to submit responses",
    Capability.VIEW_SPACE: "You must be a member to view this space",
    Capability.PROMOTE_TO_CURATOR: "Only leaders can promote members",
    Capability.ACCESS_SETTINGS: "Only leaders can access space settings",
}

_missing = set(Capability) - RULES.keys() | set(Capability) - MESSAGES.keys()
if _missing:
    raise RuntimeError(f"Permission table incomplete: {sorted(c.value for c in _missing)}")


def _coerce(capability: Capability | str) -> Capability:
    if isinstance(capability, Capability):
        return capability
    try:
        return Capability(capability)
    except ValueError:
        try:
            return Capability[capability.upper()]
        except KeyError:
            raise ValueError(f"Unknown permission: {capability!r}") from None


def has_permission(
    capability: Capability | str,
    user: PermissionUser,
    space: PermissionSpace | None = None,
) -> bool:
    """Return True if ``user`` may perform ``capability`` on ``space``.

    Space-less checks (e.g. ``CREATE_SPACE``) are evaluated against an empty
    space, so set-membership rules simply come out False.
    """
    rule = RULES[_coerce(capability)]
    return rule(user, space if space is not None else NO_SPACE)


def get_permission_message(capability: Capability | str) -> str:
    """Denial reason shown next to a disabled action."""
    return MESSAGES[_coerce(capability)]


def allowed_capabilities(
    user: PermissionUser, space: PermissionSpace | None = None
) -> frozenset[Capability]:
    return frozenset(c for c in Capability if has_permission(c, user, space))
