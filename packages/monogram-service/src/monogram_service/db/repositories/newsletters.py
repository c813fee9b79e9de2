"""Repository for compiled weekly newsletters."""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monogram.newsletter import (
    NewsletterEntry,
    NewsletterIssue,
    NewsletterSection,
    compile_newsletter,
)
from monogram_service.db.models import NewsletterModel, SpaceModel, UserModel
from monogram_service.db.repositories.prompts import PromptsRepo
from monogram_service.db.repositories.responses import ResponsesRepo

log = structlog.get_logger(__name__)

RECENT_ISSUES = 10


class NewslettersRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def build_issue(
        self,
        space: SpaceModel,
        week_number: int,
        title: str,
        curator_id: UUID | None = None,
        theme: str | None = None,
        footer_note: str | None = None,
    ) -> NewsletterIssue:
        """Gather a week's published prompts and submitted responses."""
        prompts = await PromptsRepo(self._session).list_week_prompts(space.id, week_number)
        responses = await ResponsesRepo(self._session).list_week_responses(space.id, week_number)

        by_prompt: dict[UUID, list[NewsletterEntry]] = defaultdict(list)
        for response in responses:
            by_prompt[response.prompt_id].append(
                NewsletterEntry(
                    author=response.user.name or response.user.email,
                    content=response.content,
                    image_url=response.image_url,
                    music_url=response.music_url,
                )
            )

        curator = await self._session.get(UserModel, curator_id) if curator_id else None
        return NewsletterIssue(
            space_name=space.name,
            week_number=week_number,
            title=title,
            curator_name=curator.name if curator else None,
            theme=theme,
            footer_note=footer_note,
            sections=[
                NewsletterSection(
                    question=prompt.question,
                    order=prompt.order,
                    image_url=prompt.image_url,
                    music_url=prompt.music_url,
                    entries=by_prompt.get(prompt.id, []),
                )
                for prompt in prompts
            ],
        )

    async def generate_newsletter(
        self,
        space_id: UUID,
        week_number: int,
        curator_id: UUID | None,
        title: str,
        theme: str | None = None,
        footer_note: str | None = None,
    ) -> NewsletterModel | None:
        """Compile and store an unpublished newsletter for the week."""
        space = await self._session.get(SpaceModel, space_id)
        if space is None:
            return None
        issue = await self.build_issue(space, week_number, title, curator_id, theme, footer_note)
        newsletter = NewsletterModel(
            space_id=space_id,
            week_number=week_number,
            curator_id=curator_id,
            title=title,
            theme=theme,
            footer_note=footer_note,
            body=compile_newsletter(issue),
            is_published=False,
        )
        self._session.add(newsletter)
        await self._session.commit()
        await self._session.refresh(newsletter)
        log.info(
            "newsletter_generated",
            space_id=str(space_id),
            week=week_number,
            responses=issue.response_count,
        )
        return newsletter

    async def get(self, newsletter_id: UUID) -> NewsletterModel | None:
        return await self._session.get(NewsletterModel, newsletter_id)

    async def publish_newsletter(
        self, newsletter_id: UUID, public_url: str | None = None
    ) -> NewsletterModel | None:
        newsletter = await self.get(newsletter_id)
        if newsletter is None:
            return None
        newsletter.is_published = True
        newsletter.published_at = datetime.now(UTC)
        newsletter.public_url = public_url
        space = await self._session.get(SpaceModel, newsletter.space_id)
        if space is not None:
            space.is_published = True
        await self._session.commit()
        await self._session.refresh(newsletter)
        log.info("newsletter_published", newsletter_id=str(newsletter_id))
        return newsletter

    async def list_space_newsletters(
        self, space_id: UUID, published_only: bool = False
    ) -> list[NewsletterModel]:
        """The most recent issues, newest week first."""
        query = select(NewsletterModel).where(NewsletterModel.space_id == space_id)
        if published_only:
            query = query.where(NewsletterModel.is_published.is_(True))
        result = await self._session.execute(
            query.order_by(NewsletterModel.week_number.desc(), NewsletterModel.created_at.desc())
            .limit(RECENT_ISSUES)
        )
        return list(result.scalars().all())
