"""FastAPI dependency injection for database sessions and repositories."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from monogram_service.db.engine import get_session_factory
from monogram_service.db.repositories.newsletters import NewslettersRepo
from monogram_service.db.repositories.prompts import PromptsRepo
from monogram_service.db.repositories.responses import ResponsesRepo
from monogram_service.db.repositories.spaces import SpacesRepo
from monogram_service.db.repositories.users import UsersRepo


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async DB session, auto-closing on exit."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_users_repo(session: SessionDep) -> UsersRepo:
    return UsersRepo(session)


def get_spaces_repo(session: SessionDep) -> SpacesRepo:
    return SpacesRepo(session)


def get_prompts_repo(session: SessionDep) -> PromptsRepo:
    return PromptsRepo(session)


def get_responses_repo(session: SessionDep) -> ResponsesRepo:
    return ResponsesRepo(session)


def get_newsletters_repo(session: SessionDep) -> NewslettersRepo:
    return NewslettersRepo(session)


UsersRepoDep = Annotated[UsersRepo, Depends(get_users_repo)]
SpacesRepoDep = Annotated[SpacesRepo, Depends(get_spaces_repo)]
PromptsRepoDep = Annotated[PromptsRepo, Depends(get_prompts_repo)]
ResponsesRepoDep = Annotated[ResponsesRepo, Depends(get_responses_repo)]
NewslettersRepoDep = Annotated[NewslettersRepo, Depends(get_newsletters_repo)]
