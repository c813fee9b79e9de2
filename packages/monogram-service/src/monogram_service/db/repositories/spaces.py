"""Repository for spaces, memberships and curator rotation."""

from __future__ import annotations

import random
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from monogram.rotation import select_next_curator
from monogram_service.db.models import (
    AccessType,
    CuratorRotationModel,
    MembershipModel,
    MembershipRole,
    NewsletterModel,
    PromptModel,
    ResponseModel,
    SpaceModel,
)

log = structlog.get_logger(__name__)

SPACE_FIELDS = frozenset({
    "name",
    "description",
    "access_type",
    "rotation_type",
    "publish_day",
    "current_curator_id",
})


class SpacesRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # -- spaces --------------------------------------------------------------

    async def create_space(
        self,
        name: str,
        leader_id: UUID,
        description: str | None = None,
        access_type: str = AccessType.PUBLIC.value,
        rotation_type: str = "ROUND_ROBIN",
        publish_day: int = 0,
    ) -> SpaceModel:
        """Create a space with its leader as first member and first curator."""
        space = SpaceModel(
            name=name,
            description=description,
            leader_id=leader_id,
            access_type=access_type,
            rotation_type=rotation_type,
            publish_day=publish_day,
            current_week=1,
            current_curator_id=leader_id,
            is_published=False,
        )
        self._session.add(space)
        await self._session.flush()
        self._session.add(
            MembershipModel(space_id=space.id, user_id=leader_id, role=MembershipRole.LEADER.value)
        )
        self._session.add(CuratorRotationModel(space_id=space.id, user_id=leader_id, week_number=1))
        await self._session.commit()
        await self._session.refresh(space)
        log.info("space_created", space_id=str(space.id), leader_id=str(leader_id))
        return space

    async def get_space(self, space_id: UUID) -> SpaceModel | None:
        return await self._session.get(SpaceModel, space_id)

    async def list_user_spaces(self, user_id: UUID) -> list[SpaceModel]:
        """Spaces the user belongs to, most recently updated first."""
        result = await self._session.execute(
            select(SpaceModel)
            .join(MembershipModel, MembershipModel.space_id == SpaceModel.id)
            .where(MembershipModel.user_id == user_id)
            .order_by(SpaceModel.updated_at.desc())
        )
        return list(result.scalars().all())

    async def member_counts(self, space_ids: list[UUID]) -> dict[UUID, int]:
        if not space_ids:
            return {}
        result = await self._session.execute(
            select(MembershipModel.space_id, func.count())
            .where(MembershipModel.space_id.in_(space_ids))
            .group_by(MembershipModel.space_id)
        )
        counts = {space_id: count for space_id, count in result.all()}
        return {space_id: counts.get(space_id, 0) for space_id in space_ids}

    async def update_space(self, space_id: UUID, **fields: Any) -> SpaceModel | None:
        space = await self.get_space(space_id)
        if space:
            for key, value in fields.items():
                if key in SPACE_FIELDS:
                    setattr(space, key, value)
            space.updated_at = datetime.now(UTC)
            await self._session.commit()
            await self._session.refresh(space)
        return space

    async def delete_space(self, space_id: UUID) -> bool:
        """Delete a space and everything that hangs off it."""
        space = await self.get_space(space_id)
        if space is None:
            return False
        prompt_ids = select(PromptModel.id).where(PromptModel.space_id == space_id)
        await self._session.execute(delete(ResponseModel).where(ResponseModel.prompt_id.in_(prompt_ids)))
        for model in (PromptModel, NewsletterModel, CuratorRotationModel, MembershipModel):
            await self._session.execute(delete(model).where(model.space_id == space_id))
        await self._session.delete(space)
        await self._session.commit()
        log.info("space_deleted", space_id=str(space_id))
        return True

    # -- memberships ---------------------------------------------------------

    async def get_membership(self, space_id: UUID, user_id: UUID) -> MembershipModel | None:
        return await self._session.get(MembershipModel, (space_id, user_id))

    async def join_space(self, space_id: UUID, user_id: UUID) -> MembershipModel | None:
        """Add ``user_id`` as a plain member. Returns None if already a member."""
        if await self.get_membership(space_id, user_id):
            return None
        membership = MembershipModel(
            space_id=space_id, user_id=user_id, role=MembershipRole.MEMBER.value
        )
        self._session.add(membership)
        await self._session.commit()
        await self._session.refresh(membership)
        log.info("space_joined", space_id=str(space_id), user_id=str(user_id))
        return membership

    async def leave_space(self, space_id: UUID, user_id: UUID) -> bool:
        return await self.remove_member(space_id, user_id)

    async def list_members(self, space_id: UUID) -> list[MembershipModel]:
        """Memberships with their users, in join order."""
        result = await self._session.execute(
            select(MembershipModel)
            .options(selectinload(MembershipModel.user))
            .where(MembershipModel.space_id == space_id)
            .order_by(MembershipModel.joined_at, MembershipModel.user_id)
        )
        return list(result.scalars().all())

    async def set_member_role(
        self, space_id: UUID, user_id: UUID, role: str
    ) -> MembershipModel | None:
        membership = await self.get_membership(space_id, user_id)
        if membership:
            membership.role = role
            await self._session.commit()
            await self._session.refresh(membership)
        return membership

    async def remove_member(self, space_id: UUID, user_id: UUID) -> bool:
        """Drop a membership; a removed curator stops being the current curator."""
        membership = await self.get_membership(space_id, user_id)
        if membership is None:
            return False
        await self._session.delete(membership)
        space = await self.get_space(space_id)
        if space and space.current_curator_id == user_id:
            space.current_curator_id = None
        await self._session.commit()
        log.info("member_removed", space_id=str(space_id), user_id=str(user_id))
        return True

    # -- rotation ------------------------------------------------------------

    async def rotate_curator(
        self, space_id: UUID, rng: random.Random | None = None
    ) -> UUID | None:
        """Advance to the next week's curator.

        Returns the new curator's id, or None (with nothing written) when the
        space rotates manually or has no members.
        """
        space = await self.get_space(space_id)
        if space is None:
            return None
        members = await self.list_members(space_id)
        current = str(space.current_curator_id) if space.current_curator_id else None
        next_id = select_next_curator(
            space.rotation_type, [str(m.user_id) for m in members], current, rng=rng
        )
        if next_id is None:
            log.info("curator_rotation_skipped", space_id=str(space_id), rotation_type=space.rotation_type)
            return None

        curator_id = UUID(next_id)
        new_week = space.current_week + 1
        space.current_curator_id = curator_id
        space.current_week = new_week
        space.is_published = False
        space.updated_at = datetime.now(UTC)
        self._session.add(
            CuratorRotationModel(space_id=space_id, user_id=curator_id, week_number=new_week)
        )
        await self._session.commit()
        log.info("curator_rotated", space_id=str(space_id), curator_id=next_id, week=new_week)
        return curator_id

    async def assign_curator(self, space_id: UUID, user_id: UUID) -> bool:
        """Hand the current week to a member without advancing the week."""
        space = await self.get_space(space_id)
        if space is None or await self.get_membership(space_id, user_id) is None:
            return False
        space.current_curator_id = user_id
        space.updated_at = datetime.now(UTC)
        self._session.add(
            CuratorRotationModel(space_id=space_id, user_id=user_id, week_number=space.current_week)
        )
        await self._session.commit()
        log.info("curator_assigned", space_id=str(space_id), curator_id=str(user_id))
        return True

    async def list_rotations(self, space_id: UUID) -> list[CuratorRotationModel]:
        result = await self._session.execute(
            select(CuratorRotationModel)
            .where(CuratorRotationModel.space_id == space_id)
            .order_by(CuratorRotationModel.week_number.desc(), CuratorRotationModel.rotated_at.desc())
        )
        return list(result.scalars().all())
