"""Space, membership and curator rotation endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException, Response

from monogram.permissions import (
    Capability,
    UserRole,
    allowed_capabilities,
    get_permission_message,
    has_permission,
)
from monogram_service.auth.context import SpaceContextDep, is_private
from monogram_service.auth.deps import CurrentUserDep
from monogram_service.db.deps import SpacesRepoDep
from monogram_service.db.models import MembershipRole
from monogram_service.rest.schemas import (
    AssignCuratorRequest,
    CreateSpaceRequest,
    JoinSpaceRequest,
    MemberRoleRequest,
    MemberSchema,
    PermissionsResponse,
    RotateResponse,
    RotationSchema,
    SpaceListResponse,
    SpaceSchema,
    UpdateSpaceRequest,
)

router = APIRouter()

SETTINGS_FIELDS = frozenset({"access_type", "rotation_type", "publish_day"})
CLEARABLE_FIELDS = frozenset({"description"})


def space_to_schema(space, member_count: int = 0, role: UserRole | None = None) -> SpaceSchema:
    """Convert an ORM SpaceModel to the REST SpaceSchema."""
    return SpaceSchema(
        id=str(space.id),
        name=space.name,
        description=space.description,
        leader_id=str(space.leader_id),
        access_type=space.access_type,
        rotation_type=space.rotation_type,
        publish_day=space.publish_day,
        current_week=space.current_week,
        current_curator_id=str(space.current_curator_id) if space.current_curator_id else None,
        is_published=space.is_published,
        member_count=member_count,
        role=role,
        created_at=space.created_at,
        updated_at=space.updated_at,
    )


def _member_to_schema(membership) -> MemberSchema:
    return MemberSchema(
        user_id=str(membership.user_id),
        name=membership.user.name,
        email=membership.user.email,
        avatar_url=membership.user.avatar_url,
        role=membership.role,
        joined_at=membership.joined_at,
        total_submissions=membership.total_submissions,
    )


# ---------------------------------------------------------------------------
# Spaces
# ---------------------------------------------------------------------------


@router.post("/spaces", response_model=SpaceSchema, status_code=201)
async def create_space(
    request: CreateSpaceRequest, current_user: CurrentUserDep, repo: SpacesRepoDep
) -> SpaceSchema:
    if not has_permission(Capability.CREATE_SPACE, current_user.as_permission_user()):
        raise HTTPException(status_code=403, detail=get_permission_message(Capability.CREATE_SPACE))
    space = await repo.create_space(
        name=request.name,
        leader_id=current_user.user_id,
        description=request.description,
        access_type=request.access_type.value,
        rotation_type=request.rotation_type.value,
        publish_day=request.publish_day,
    )
    return space_to_schema(space, member_count=1, role=UserRole.LEADER)


@router.get("/spaces", response_model=SpaceListResponse)
async def list_spaces(current_user: CurrentUserDep, repo: SpacesRepoDep) -> SpaceListResponse:
    spaces = await repo.list_user_spaces(current_user.user_id)
    counts = await repo.member_counts([s.id for s in spaces])
    return SpaceListResponse(
        spaces=[space_to_schema(s, member_count=counts.get(s.id, 0)) for s in spaces],
        total=len(spaces),
    )


@router.get("/spaces/{space_id}", response_model=SpaceSchema)
async def get_space(ctx: SpaceContextDep) -> SpaceSchema:
    """Members see their space; public spaces can be previewed before joining."""
    if is_private(ctx.space):
        ctx.require(Capability.VIEW_SPACE)
    return space_to_schema(
        ctx.space,
        member_count=len(ctx.permissions.members),
        role=ctx.role if ctx.is_member else None,
    )


@router.patch("/spaces/{space_id}", response_model=SpaceSchema)
async def update_space(
    request: UpdateSpaceRequest, ctx: SpaceContextDep, repo: SpacesRepoDep
) -> SpaceSchema:
    fields = {
        key: value
        for key, value in request.model_dump(exclude_unset=True, mode="json").items()
        if value is not None or key in CLEARABLE_FIELDS
    }
    ctx.require(Capability.EDIT_SPACE)
    if fields.keys() & SETTINGS_FIELDS:
        ctx.require(Capability.ACCESS_SETTINGS)
    space = await repo.update_space(ctx.space_id, **fields)
    return space_to_schema(space, member_count=len(ctx.permissions.members), role=ctx.role)


@router.delete("/spaces/{space_id}", status_code=204)
async def delete_space(ctx: SpaceContextDep, repo: SpacesRepoDep) -> Response:
    ctx.require(Capability.DELETE_SPACE)
    await repo.delete_space(ctx.space_id)
    return Response(status_code=204)


@router.get("/spaces/{space_id}/permissions", response_model=PermissionsResponse)
async def get_permissions(ctx: SpaceContextDep) -> PermissionsResponse:
    """Capabilities the caller holds in this space, for enabling UI actions."""
    capabilities = allowed_capabilities(ctx.user, ctx.permissions)
    return PermissionsResponse(role=ctx.role, capabilities=sorted(c.value for c in capabilities))


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


@router.post("/spaces/{space_id}/join", response_model=SpaceSchema)
async def join_space(
    ctx: SpaceContextDep, repo: SpacesRepoDep, request: JoinSpaceRequest | None = None
) -> SpaceSchema:
    if ctx.is_member:
        raise HTTPException(status_code=409, detail="Already a member of this space")
    invite_code = request.invite_code.strip() if request and request.invite_code else None
    if is_private(ctx.space) and invite_code != str(ctx.space_id):
        raise HTTPException(
            status_code=403, detail="A valid invite code is required to join this space"
        )
    if await repo.join_space(ctx.space_id, ctx.current_user.user_id) is None:
        raise HTTPException(status_code=409, detail="Already a member of this space")
    return space_to_schema(
        ctx.space, member_count=len(ctx.permissions.members) + 1, role=UserRole.MEMBER
    )


@router.post("/spaces/{space_id}/leave", status_code=204)
async def leave_space(ctx: SpaceContextDep, repo: SpacesRepoDep) -> Response:
    if not ctx.is_member:
        raise HTTPException(status_code=404, detail="Not a member of this space")
    if ctx.space.leader_id == ctx.current_user.user_id:
        raise HTTPException(status_code=400, detail="The leader cannot leave their own space")
    await repo.leave_space(ctx.space_id, ctx.current_user.user_id)
    return Response(status_code=204)


@router.get("/spaces/{space_id}/members", response_model=list[MemberSchema])
async def list_members(ctx: SpaceContextDep, repo: SpacesRepoDep) -> list[MemberSchema]:
    ctx.require(Capability.VIEW_SPACE)
    return [_member_to_schema(m) for m in await repo.list_members(ctx.space_id)]


@router.patch("/spaces/{space_id}/members/{user_id}", response_model=MemberSchema)
async def set_member_role(
    user_id: UUID, request: MemberRoleRequest, ctx: SpaceContextDep, repo: SpacesRepoDep
) -> MemberSchema:
    """Promote a member to curator or demote them back."""
    ctx.require(Capability.PROMOTE_TO_CURATOR)
    if request.role is MembershipRole.LEADER or user_id == ctx.space.leader_id:
        raise HTTPException(status_code=400, detail="The leader role cannot be changed")
    if await repo.set_member_role(ctx.space_id, user_id, request.role.value) is None:
        raise HTTPException(status_code=404, detail="Member not found")
    members = await repo.list_members(ctx.space_id)
    return _member_to_schema(next(m for m in members if m.user_id == user_id))


@router.delete("/spaces/{space_id}/members/{user_id}", status_code=204)
async def remove_member(user_id: UUID, ctx: SpaceContextDep, repo: SpacesRepoDep) -> Response:
    ctx.require(Capability.MANAGE_MEMBERS)
    if user_id == ctx.space.leader_id:
        raise HTTPException(status_code=400, detail="The leader cannot be removed")
    if not await repo.remove_member(ctx.space_id, user_id):
        raise HTTPException(status_code=404, detail="Member not found")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Curator rotation
# ---------------------------------------------------------------------------


@router.post("/spaces/{space_id}/rotate", response_model=RotateResponse)
async def rotate_curator(ctx: SpaceContextDep, repo: SpacesRepoDep) -> RotateResponse:
    """Move the space to next week under its next curator.

    Manual-rotation spaces are left as they are (``rotated`` is false).
    """
    ctx.require(Capability.MANAGE_MEMBERS)
    curator_id = await repo.rotate_curator(ctx.space_id)
    space = await repo.get_space(ctx.space_id)
    return RotateResponse(
        rotated=curator_id is not None,
        curator_id=str(curator_id) if curator_id else None,
        space=space_to_schema(space, member_count=len(ctx.permissions.members), role=ctx.role),
    )


@router.put("/spaces/{space_id}/curator", response_model=SpaceSchema)
async def assign_curator(
    request: AssignCuratorRequest, ctx: SpaceContextDep, repo: SpacesRepoDep
) -> SpaceSchema:
    ctx.require(Capability.MANAGE_MEMBERS)
    if not await repo.assign_curator(ctx.space_id, request.user_id):
        raise HTTPException(status_code=400, detail="The curator must be a member of this space")
    space = await repo.get_space(ctx.space_id)
    return space_to_schema(space, member_count=len(ctx.permissions.members), role=ctx.role)


@router.get("/spaces/{space_id}/rotations", response_model=list[RotationSchema])
async def list_rotations(ctx: SpaceContextDep, repo: SpacesRepoDep) -> list[RotationSchema]:
    ctx.require(Capability.VIEW_SPACE)
    return [
        RotationSchema(
            id=str(r.id),
            user_id=str(r.user_id),
            week_number=r.week_number,
            rotated_at=r.rotated_at,
        )
        for r in await repo.list_rotations(ctx.space_id)
    ]
