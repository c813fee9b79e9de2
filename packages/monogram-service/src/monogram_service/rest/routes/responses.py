"""Response editor endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException, Response

from monogram.permissions import Capability
from monogram_service.auth.context import SpaceContext, SpaceContextDep
from monogram_service.db.deps import PromptsRepoDep, ResponsesRepoDep
from monogram_service.db.repositories.prompts import PromptsRepo
from monogram_service.rest.schemas import ResponseSchema, SubmitResponseRequest

router = APIRouter()


def response_to_schema(response, author_name: str | None = None) -> ResponseSchema:
    return ResponseSchema(
        id=str(response.id),
        prompt_id=str(response.prompt_id),
        user_id=str(response.user_id),
        author_name=author_name,
        content=response.content,
        image_url=response.image_url,
        music_url=response.music_url,
        is_draft=response.is_draft,
        created_at=response.created_at,
        updated_at=response.updated_at,
    )


async def _space_prompt(prompt_id: UUID, ctx: SpaceContext, prompts: PromptsRepo):
    prompt = await prompts.get(prompt_id)
    if not prompt or prompt.space_id != ctx.space_id:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return prompt


@router.put("/spaces/{space_id}/prompts/{prompt_id}/response", response_model=ResponseSchema)
async def submit_response(
    prompt_id: UUID,
    request: SubmitResponseRequest,
    ctx: SpaceContextDep,
    prompts: PromptsRepoDep,
    repo: ResponsesRepoDep,
) -> ResponseSchema:
    """Save the caller's response, as a draft or submitted."""
    ctx.require(Capability.SUBMIT_RESPONSE)
    prompt = await _space_prompt(prompt_id, ctx, prompts)
    if not prompt.is_published:
        raise HTTPException(status_code=400, detail="This prompt is not open for responses yet")
    if not request.is_draft and not (request.content.strip() or request.image_url or request.music_url):
        raise HTTPException(status_code=400, detail="A submitted response cannot be empty")

    response = await repo.submit_response(
        prompt_id=prompt_id,
        user_id=ctx.current_user.user_id,
        content=request.content,
        image_url=request.image_url,
        music_url=request.music_url,
        is_draft=request.is_draft,
    )
    return response_to_schema(response)


@router.get("/spaces/{space_id}/prompts/{prompt_id}/response", response_model=ResponseSchema)
async def get_my_response(
    prompt_id: UUID, ctx: SpaceContextDep, prompts: PromptsRepoDep, repo: ResponsesRepoDep
) -> ResponseSchema:
    """The caller's own response, drafts included."""
    ctx.require(Capability.SUBMIT_RESPONSE)
    await _space_prompt(prompt_id, ctx, prompts)
    response = await repo.get_user_response(prompt_id, ctx.current_user.user_id)
    if not response:
        raise HTTPException(status_code=404, detail="No response yet")
    return response_to_schema(response)


@router.get("/spaces/{space_id}/prompts/{prompt_id}/responses", response_model=list[ResponseSchema])
async def list_responses(
    prompt_id: UUID, ctx: SpaceContextDep, prompts: PromptsRepoDep, repo: ResponsesRepoDep
) -> list[ResponseSchema]:
    ctx.require(Capability.VIEW_SPACE)
    await _space_prompt(prompt_id, ctx, prompts)
    return [
        response_to_schema(r, author_name=r.user.name)
        for r in await repo.list_for_prompt(prompt_id)
    ]


@router.get("/spaces/{space_id}/writings", response_model=list[ResponseSchema])
async def list_my_writings(ctx: SpaceContextDep, repo: ResponsesRepoDep) -> list[ResponseSchema]:
    ctx.require(Capability.VIEW_SPACE)
    return [
        response_to_schema(r)
        for r in await repo.list_user_writings(ctx.space_id, ctx.current_user.user_id)
    ]


@router.delete("/spaces/{space_id}/responses/{response_id}", status_code=204)
async def delete_response(
    response_id: UUID, ctx: SpaceContextDep, prompts: PromptsRepoDep, repo: ResponsesRepoDep
) -> Response:
    """Authors may delete their own response; moderators may delete any."""
    response = await repo.get(response_id)
    if not response:
        raise HTTPException(status_code=404, detail="Response not found")
    await _space_prompt(response.prompt_id, ctx, prompts)
    if response.user_id != ctx.current_user.user_id:
        ctx.require(Capability.MODERATE_CONTENT)
    await repo.delete_response(response_id)
    return Response(status_code=204)
