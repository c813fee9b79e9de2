"""Repository for member responses to prompts."""

from __future__ import annotations

from datetime import UTC, date, datetime
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from monogram.streaks import next_streak
from monogram_service.db.models import MembershipModel, PromptModel, ResponseModel, UserModel

log = structlog.get_logger(__name__)


class ResponsesRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, response_id: UUID) -> ResponseModel | None:
        return await self._session.get(ResponseModel, response_id)

    async def submit_response(
        self,
        prompt_id: UUID,
        user_id: UUID,
        content: str,
        image_url: str | None = None,
        music_url: str | None = None,
        is_draft: bool = False,
        today: date | None = None,
    ) -> ResponseModel:
        """Create or update the user's single response to a prompt.

        The first non-draft save counts toward the member's submissions and
        stamps ``submitted_at``; moving back to a draft and resubmitting does
        not count again. Every non-draft save marks the user active for streak
        purposes.
        """
        result = await self._session.execute(
            select(ResponseModel).where(
                ResponseModel.prompt_id == prompt_id, ResponseModel.user_id == user_id
            )
        )
        response = result.scalars().first()
        newly_submitted = not is_draft and (response is None or response.submitted_at is None)

        if response is None:
            response = ResponseModel(prompt_id=prompt_id, user_id=user_id)
            self._session.add(response)
        now = datetime.now(UTC)
        response.content = content
        response.image_url = image_url
        response.music_url = music_url
        response.is_draft = is_draft
        response.updated_at = now

        if newly_submitted:
            response.submitted_at = now
            prompt = await self._session.get(PromptModel, prompt_id)
            if prompt is not None:
                membership = await self._session.get(MembershipModel, (prompt.space_id, user_id))
                if membership is not None:
                    membership.total_submissions += 1
        if not is_draft:
            user = await self._session.get(UserModel, user_id)
            if user is not None:
                streak = next_streak(
                    user.current_streak,
                    user.longest_streak,
                    user.last_active_date,
                    today or datetime.now(UTC).date(),
                )
                user.current_streak = streak.current
                user.longest_streak = streak.longest
                user.last_active_date = streak.last_active

        await self._session.commit()
        await self._session.refresh(response)
        log.info(
            "response_saved",
            prompt_id=str(prompt_id),
            user_id=str(user_id),
            draft=is_draft,
        )
        return response

    async def get_user_response(self, prompt_id: UUID, user_id: UUID) -> ResponseModel | None:
        result = await self._session.execute(
            select(ResponseModel).where(
                ResponseModel.prompt_id == prompt_id, ResponseModel.user_id == user_id
            )
        )
        return result.scalars().first()

    async def list_for_prompt(self, prompt_id: UUID) -> list[ResponseModel]:
        """Submitted (non-draft) responses with their authors."""
        result = await self._session.execute(
            select(ResponseModel)
            .options(selectinload(ResponseModel.user))
            .where(ResponseModel.prompt_id == prompt_id, ResponseModel.is_draft.is_(False))
            .order_by(ResponseModel.created_at)
        )
        return list(result.scalars().all())

    async def list_week_responses(self, space_id: UUID, week_number: int) -> list[ResponseModel]:
        """Submitted responses to a week's published prompts, authors and prompts loaded."""
        result = await self._session.execute(
            select(ResponseModel)
            .join(PromptModel, PromptModel.id == ResponseModel.prompt_id)
            .options(selectinload(ResponseModel.user), selectinload(ResponseModel.prompt))
            .where(
                PromptModel.space_id == space_id,
                PromptModel.week_number == week_number,
                PromptModel.is_published.is_(True),
                ResponseModel.is_draft.is_(False),
            )
            .order_by(PromptModel.order, ResponseModel.created_at)
        )
        return list(result.scalars().all())

    async def list_user_writings(self, space_id: UUID, user_id: UUID) -> list[ResponseModel]:
        """Everything ``user_id`` submitted in a space, prompts loaded."""
        result = await self._session.execute(
            select(ResponseModel)
            .join(PromptModel, PromptModel.id == ResponseModel.prompt_id)
            .options(selectinload(ResponseModel.prompt))
            .where(
                PromptModel.space_id == space_id,
                ResponseModel.user_id == user_id,
                ResponseModel.is_draft.is_(False),
            )
            .order_by(PromptModel.week_number.desc(), PromptModel.order)
        )
        return list(result.scalars().all())

    async def delete_response(self, response_id: UUID) -> bool:
        response = await self.get(response_id)
        if response is None:
            return False
        await self._session.delete(response)
        await self._session.commit()
        log.info("response_deleted", response_id=str(response_id))
        return True
