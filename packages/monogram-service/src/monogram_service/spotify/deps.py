"""FastAPI dependencies for Spotify access."""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends

from monogram.spotify import SpotifyError, SpotifyErrorCode, SpotifyTokens
from monogram_service.auth.deps import CurrentUserDep
from monogram_service.db.deps import UsersRepoDep
from monogram_service.spotify.client import SpotifyClient


def get_spotify_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outbound Spotify calls; None means the real network."""
    return None


SpotifyTransportDep = Annotated[httpx.AsyncBaseTransport | None, Depends(get_spotify_transport)]


async def get_spotify_client(
    current_user: CurrentUserDep,
    users: UsersRepoDep,
    transport: SpotifyTransportDep,
) -> SpotifyClient:
    tokens = await users.get_spotify_tokens(current_user.user_id)
    if tokens is None:
        raise SpotifyError(SpotifyErrorCode.NOT_CONNECTED)

    async def _save(new_tokens: SpotifyTokens) -> None:
        await users.save_spotify_tokens(current_user.user_id, new_tokens)

    return SpotifyClient(tokens, on_refresh=_save, transport=transport)


SpotifyClientDep = Annotated[SpotifyClient, Depends(get_spotify_client)]
