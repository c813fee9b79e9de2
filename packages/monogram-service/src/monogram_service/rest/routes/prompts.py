"""Curator panel: weekly prompt endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException, Response

from monogram.permissions import Capability
from monogram_service.auth.context import SpaceContextDep
from monogram_service.db.deps import PromptsRepoDep
from monogram_service.rest.schemas import CreatePromptsRequest, PromptSchema, PublishPromptsResponse

router = APIRouter()


def prompt_to_schema(prompt) -> PromptSchema:
    return PromptSchema(
        id=str(prompt.id),
        space_id=str(prompt.space_id),
        curator_id=str(prompt.curator_id),
        week_number=prompt.week_number,
        question=prompt.question,
        order=prompt.order,
        image_url=prompt.image_url,
        music_url=prompt.music_url,
        media_type=prompt.media_type,
        is_published=prompt.is_published,
        created_at=prompt.created_at,
    )


@router.post("/spaces/{space_id}/prompts", response_model=list[PromptSchema], status_code=201)
async def create_prompts(
    request: CreatePromptsRequest, ctx: SpaceContextDep, repo: PromptsRepoDep
) -> list[PromptSchema]:
    """Draft a week's prompts (the current week unless one is given)."""
    ctx.require(Capability.SET_QUESTIONS)
    prompts = await repo.create_prompts(
        space_id=ctx.space_id,
        curator_id=ctx.current_user.user_id,
        week_number=request.week_number or ctx.space.current_week,
        prompts=[p.model_dump(mode="json", exclude_none=True) for p in request.prompts],
    )
    return [prompt_to_schema(p) for p in prompts]


@router.get("/spaces/{space_id}/prompts", response_model=list[PromptSchema])
async def list_prompts(
    ctx: SpaceContextDep, repo: PromptsRepoDep, week: int | None = None
) -> list[PromptSchema]:
    """A week's prompts. Unpublished drafts are only shown to those who can edit them."""
    ctx.require(Capability.VIEW_SPACE)
    prompts = await repo.list_week_prompts(
        ctx.space_id,
        week or ctx.space.current_week,
        published_only=not ctx.can(Capability.SET_QUESTIONS),
    )
    return [prompt_to_schema(p) for p in prompts]


@router.post("/spaces/{space_id}/prompts/publish", response_model=PublishPromptsResponse)
async def publish_prompts(
    ctx: SpaceContextDep, repo: PromptsRepoDep, week: int | None = None
) -> PublishPromptsResponse:
    ctx.require(Capability.SET_QUESTIONS)
    week_number = week or ctx.space.current_week
    published = await repo.publish_prompts(ctx.space_id, week_number)
    if not published:
        raise HTTPException(status_code=404, detail=f"No prompts for week {week_number}")
    return PublishPromptsResponse(week_number=week_number, published=published)


@router.delete("/spaces/{space_id}/prompts/{prompt_id}", status_code=204)
async def delete_prompt(prompt_id: UUID, ctx: SpaceContextDep, repo: PromptsRepoDep) -> Response:
    ctx.require(Capability.SET_QUESTIONS)
    prompt = await repo.get(prompt_id)
    if not prompt or prompt.space_id != ctx.space_id:
        raise HTTPException(status_code=404, detail="Prompt not found")
    await repo.delete_prompt(prompt_id)
    return Response(status_code=204)
