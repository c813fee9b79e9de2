"""Download a member's writings in a space."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Response

from monogram.export import Writing, render_export
from monogram.permissions import Capability
from monogram_service.auth.context import SpaceContextDep
from monogram_service.db.deps import ResponsesRepoDep

router = APIRouter()


@router.get("/spaces/{space_id}/export")
async def export_writings(
    ctx: SpaceContextDep,
    repo: ResponsesRepoDep,
    format: str = "markdown",
    include_prompts: bool = True,
    include_dates: bool = True,
) -> Response:
    ctx.require(Capability.VIEW_SPACE)
    responses = await repo.list_user_writings(ctx.space_id, ctx.current_user.user_id)
    writings = [
        Writing(
            week=r.prompt.week_number,
            written_on=r.created_at.date(),
            prompt=r.prompt.question,
            content=r.content,
        )
        for r in responses
    ]
    try:
        export = render_export(
            ctx.space.name,
            writings,
            format,
            include_prompts=include_prompts,
            include_dates=include_dates,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(
        content=export.content,
        media_type=export.content_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(export.filename)}"},
    )
