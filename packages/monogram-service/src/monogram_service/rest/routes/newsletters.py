"""Newsletter endpoints: compile, list, publish."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException

from monogram.permissions import Capability
from monogram_service.auth.context import SpaceContext, SpaceContextDep
from monogram_service.db.deps import NewslettersRepoDep
from monogram_service.db.repositories.newsletters import NewslettersRepo
from monogram_service.rest.schemas import GenerateNewsletterRequest, NewsletterSchema
from monogram_service.settings import settings

router = APIRouter()


def _newsletter_to_schema(newsletter) -> NewsletterSchema:
    return NewsletterSchema(
        id=str(newsletter.id),
        space_id=str(newsletter.space_id),
        week_number=newsletter.week_number,
        curator_id=str(newsletter.curator_id) if newsletter.curator_id else None,
        title=newsletter.title,
        theme=newsletter.theme,
        footer_note=newsletter.footer_note,
        body=newsletter.body,
        is_published=newsletter.is_published,
        published_at=newsletter.published_at,
        public_url=newsletter.public_url,
        created_at=newsletter.created_at,
    )


async def _get_visible(newsletter_id: UUID, ctx: SpaceContext, repo: NewslettersRepo):
    newsletter = await repo.get(newsletter_id)
    if (
        not newsletter
        or newsletter.space_id != ctx.space_id
        or (not newsletter.is_published and not ctx.can(Capability.SET_QUESTIONS))
    ):
        raise HTTPException(status_code=404, detail="Newsletter not found")
    return newsletter


@router.post("/spaces/{space_id}/newsletters", response_model=NewsletterSchema, status_code=201)
async def generate_newsletter(
    request: GenerateNewsletterRequest, ctx: SpaceContextDep, repo: NewslettersRepoDep
) -> NewsletterSchema:
    """Compile the week's published prompts and submitted responses into a draft issue."""
    ctx.require(Capability.SET_QUESTIONS)
    newsletter = await repo.generate_newsletter(
        space_id=ctx.space_id,
        week_number=request.week_number or ctx.space.current_week,
        curator_id=ctx.space.current_curator_id,
        title=request.title,
        theme=request.theme,
        footer_note=request.footer_note,
    )
    if newsletter is None:
        raise HTTPException(status_code=404, detail="Space not found")
    return _newsletter_to_schema(newsletter)


@router.get("/spaces/{space_id}/newsletters", response_model=list[NewsletterSchema])
async def list_newsletters(ctx: SpaceContextDep, repo: NewslettersRepoDep) -> list[NewsletterSchema]:
    ctx.require(Capability.VIEW_SPACE)
    newsletters = await repo.list_space_newsletters(
        ctx.space_id, published_only=not ctx.can(Capability.SET_QUESTIONS)
    )
    return [_newsletter_to_schema(n) for n in newsletters]


@router.get("/spaces/{space_id}/newsletters/{newsletter_id}", response_model=NewsletterSchema)
async def get_newsletter(
    newsletter_id: UUID, ctx: SpaceContextDep, repo: NewslettersRepoDep
) -> NewsletterSchema:
    ctx.require(Capability.VIEW_SPACE)
    return _newsletter_to_schema(await _get_visible(newsletter_id, ctx, repo))


@router.post(
    "/spaces/{space_id}/newsletters/{newsletter_id}/publish", response_model=NewsletterSchema
)
async def publish_newsletter(
    newsletter_id: UUID, ctx: SpaceContextDep, repo: NewslettersRepoDep
) -> NewsletterSchema:
    ctx.require(Capability.SET_QUESTIONS)
    await _get_visible(newsletter_id, ctx, repo)
    public_url = f"{settings.app_url.rstrip('/')}/newsletters/{newsletter_id}"
    newsletter = await repo.publish_newsletter(newsletter_id, public_url=public_url)
    return _newsletter_to_schema(newsletter)
