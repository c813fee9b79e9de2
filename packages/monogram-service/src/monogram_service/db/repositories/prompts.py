"""Repository for weekly prompts."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from monogram_service.db.models import MediaType, PromptModel, ResponseModel

log = structlog.get_logger(__name__)

MAX_PROMPTS_PER_WEEK = 10


class PromptsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_prompts(
        self,
        space_id: UUID,
        curator_id: UUID,
        week_number: int,
        prompts: list[dict[str, Any]],
    ) -> list[PromptModel]:
        """Create a week's prompts, unpublished.

        Each item needs ``question`` and may carry ``order``, ``image_url``,
        ``music_url`` and ``media_type``.
        """
        if not 1 <= len(prompts) <= MAX_PROMPTS_PER_WEEK:
            raise ValueError(f"A week takes between 1 and {MAX_PROMPTS_PER_WEEK} prompts")
        models = [
            PromptModel(
                space_id=space_id,
                curator_id=curator_id,
                week_number=week_number,
                question=item["question"],
                order=item.get("order", index),
                image_url=item.get("image_url"),
                music_url=item.get("music_url"),
                media_type=item.get("media_type") or MediaType.TEXT.value,
                is_published=False,
            )
            for index, item in enumerate(prompts)
        ]
        self._session.add_all(models)
        await self._session.commit()
        for model in models:
            await self._session.refresh(model)
        log.info("prompts_created", space_id=str(space_id), week=week_number, count=len(models))
        return models

    async def get(self, prompt_id: UUID) -> PromptModel | None:
        return await self._session.get(PromptModel, prompt_id)

    async def publish_prompts(self, space_id: UUID, week_number: int) -> int:
        """Publish every prompt of the week; returns how many were updated."""
        result = await self._session.execute(
            update(PromptModel)
            .where(PromptModel.space_id == space_id, PromptModel.week_number == week_number)
            .values(is_published=True)
        )
        await self._session.commit()
        log.info("prompts_published", space_id=str(space_id), week=week_number, count=result.rowcount)
        return result.rowcount

    async def list_week_prompts(
        self, space_id: UUID, week_number: int, published_only: bool = True
    ) -> list[PromptModel]:
        query = select(PromptModel).where(
            PromptModel.space_id == space_id, PromptModel.week_number == week_number
        )
        if published_only:
            query = query.where(PromptModel.is_published.is_(True))
        result = await self._session.execute(query.order_by(PromptModel.order))
        return list(result.scalars().all())

    async def delete_prompt(self, prompt_id: UUID) -> bool:
        prompt = await self.get(prompt_id)
        if prompt is None:
            return False
        await self._session.execute(delete(ResponseModel).where(ResponseModel.prompt_id == prompt_id))
        await self._session.delete(prompt)
        await self._session.commit()
        return True
