"""Spotify Web API client with transparent token refresh."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog

from monogram.spotify import (
    SpotifyError,
    SpotifyErrorCode,
    SpotifyTokens,
    TrackMetadata,
    parse_spotify_url,
    track_to_metadata,
    track_uri,
)
from monogram.spotify.types import API_BASE_URL, PLAYLIST_CHUNK_SIZE
from monogram_service.settings import settings
from monogram_service.spotify.oauth import refresh_tokens

log = structlog.get_logger(__name__)

TokenSaver = Callable[[SpotifyTokens], Awaitable[None]]

_STATUS_ERRORS = {
    403: SpotifyErrorCode.INSUFFICIENT_SCOPE,
    404: SpotifyErrorCode.TRACK_NOT_FOUND,
    429: SpotifyErrorCode.RATE_LIMITED,
}


class SpotifyClient:
    """One user's view of the Web API.

    Tokens are refreshed before a call when they are about to expire and once
    more if Spotify still answers 401. ``on_refresh`` persists new tokens.
    """

    def __init__(
        self,
        tokens: SpotifyTokens,
        on_refresh: TokenSaver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._tokens = tokens
        self._on_refresh = on_refresh
        self._transport = transport

    @property
    def tokens(self) -> SpotifyTokens:
        return self._tokens

    async def _refresh(self) -> None:
        self._tokens = await refresh_tokens(self._tokens.refresh_token, transport=self._transport)
        if self._on_refresh is not None:
            await self._on_refresh(self._tokens)
        log.info("spotify_token_refreshed")

    async def _send(self, method: str, path: str, json: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=API_BASE_URL,
                timeout=settings.spotify_timeout_seconds,
                transport=self._transport,
            ) as client:
                return await client.request(
                    method,
                    path,
                    json=json,
                    headers={"Authorization": f"Bearer {self._tokens.access_token}"},
                )
        except httpx.HTTPError as exc:
            log.warning("spotify_network_error", path=path, error=str(exc))
            raise SpotifyError(SpotifyErrorCode.NETWORK_ERROR) from exc

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        if self._tokens.is_expired():
            await self._refresh()
        resp = await self._send(method, path, json)
        if resp.status_code == 401:
            await self._refresh()
            resp = await self._send(method, path, json)
            if resp.status_code == 401:
                raise SpotifyError(SpotifyErrorCode.TOKEN_INVALID)

        if resp.status_code in _STATUS_ERRORS:
            raise SpotifyError(_STATUS_ERRORS[resp.status_code])
        if resp.is_error:
            log.warning("spotify_api_error", path=path, status=resp.status_code)
            raise SpotifyError(SpotifyErrorCode.API_ERROR)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # -- tracks --------------------------------------------------------------

    async def get_currently_playing(self) -> TrackMetadata | None:
        data = await self.request("GET", "/me/player/currently-playing")
        if not data or not data.get("item"):
            return None
        return track_to_metadata(data["item"])

    async def get_track(self, track_id: str) -> TrackMetadata:
        return track_to_metadata(await self.request("GET", f"/tracks/{track_id}"))

    async def get_track_from_url(self, url: str) -> TrackMetadata:
        link_type, item_id = parse_spotify_url(url)
        if item_id is None:
            raise SpotifyError(SpotifyErrorCode.INVALID_URL)
        if link_type != "track":
            raise SpotifyError(
                SpotifyErrorCode.INVALID_URL,
                "Only track URLs are supported. Please paste a Spotify track link.",
            )
        return await self.get_track(item_id)

    # -- playlists -----------------------------------------------------------

    async def get_current_user_profile(self) -> dict[str, Any]:
        return await self.request("GET", "/me")

    async def create_playlist(
        self, user_id: str, name: str, description: str = "", public: bool = True
    ) -> dict[str, Any]:
        return await self.request(
            "POST",
            f"/users/{user_id}/playlists",
            {"name": name, "description": description, "public": public},
        )

    async def add_tracks(self, playlist_id: str, uris: list[str]) -> None:
        for start in range(0, len(uris), PLAYLIST_CHUNK_SIZE):
            await self.request(
                "POST",
                f"/playlists/{playlist_id}/tracks",
                {"uris": uris[start : start + PLAYLIST_CHUNK_SIZE]},
            )

    async def build_playlist(
        self, name: str, track_ids: list[str], description: str = ""
    ) -> dict[str, Any]:
        """Create a playlist on the user's account and fill it with ``track_ids``."""
        profile = await self.get_current_user_profile()
        try:
            playlist = await self.create_playlist(profile["id"], name, description)
        except SpotifyError as exc:
            if exc.code is SpotifyErrorCode.API_ERROR:
                raise SpotifyError(SpotifyErrorCode.PLAYLIST_CREATE_FAILED) from exc
            raise
        try:
            await self.add_tracks(playlist["id"], [track_uri(t) for t in track_ids])
        except SpotifyError as exc:
            raise SpotifyError(SpotifyErrorCode.PLAYLIST_ADD_TRACKS_FAILED) from exc
        log.info("spotify_playlist_built", playlist_id=playlist["id"], tracks=len(track_ids))
        return playlist
