"""Spotify connection, track lookup and playlist endpoints."""

from __future__ import annotations

from urllib.parse import urlencode

import jwt
import structlog
from fastapi import APIRouter, HTTPException, Response
from fastapi.responses import RedirectResponse

from monogram.permissions import Capability
from monogram.spotify import SpotifyError, SpotifyErrorCode, TrackMetadata, parse_spotify_url
from monogram_service.auth.context import SpaceContextDep
from monogram_service.auth.deps import CurrentUserDep
from monogram_service.auth.jwt import create_oauth_state, decode_oauth_state
from monogram_service.db.deps import NewslettersRepoDep, UsersRepoDep
from monogram_service.rest.schemas import (
    AuthorizeResponse,
    PlaylistRequest,
    PlaylistResponse,
    SpotifyStatusSchema,
)
from monogram_service.settings import settings
from monogram_service.spotify.deps import SpotifyClientDep, SpotifyTransportDep
from monogram_service.spotify.oauth import build_authorize_url, exchange_code

router = APIRouter()
log = structlog.get_logger(__name__)


def _settings_redirect(**params: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.app_url.rstrip('/')}/settings?{urlencode(params)}", status_code=302
    )


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


@router.get("/spotify/authorize", response_model=AuthorizeResponse)
async def authorize(current_user: CurrentUserDep) -> AuthorizeResponse:
    """URL to send the browser to; the state token ties the callback to this user."""
    if not settings.spotify_client_id:
        raise HTTPException(status_code=503, detail="Spotify is not configured")
    return AuthorizeResponse(url=build_authorize_url(create_oauth_state(current_user.user_id)))


@router.get("/spotify/callback")
async def callback(
    users: UsersRepoDep,
    transport: SpotifyTransportDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """Redirect target registered with Spotify. Always bounces back to the app."""
    if error:
        failure = SpotifyErrorCode.OAUTH_DENIED if error == "access_denied" else SpotifyErrorCode.OAUTH_FAILED
        log.info("spotify_oauth_error", error=error)
        return _settings_redirect(spotify_error=failure.value)
    if not code or not state:
        return _settings_redirect(spotify_error=SpotifyErrorCode.OAUTH_FAILED.value)

    try:
        user_id = decode_oauth_state(state)
    except (jwt.PyJWTError, ValueError, KeyError):
        log.warning("spotify_oauth_invalid_state")
        return _settings_redirect(spotify_error=SpotifyErrorCode.OAUTH_INVALID_STATE.value)

    try:
        tokens = await exchange_code(code, transport=transport)
    except SpotifyError as exc:
        return _settings_redirect(spotify_error=exc.code.value)

    await users.save_spotify_tokens(user_id, tokens)
    log.info("spotify_connected", user_id=str(user_id))
    return _settings_redirect(spotify="connected")


@router.get("/spotify/status", response_model=SpotifyStatusSchema)
async def status(current_user: CurrentUserDep, users: UsersRepoDep) -> SpotifyStatusSchema:
    tokens = await users.get_spotify_tokens(current_user.user_id)
    if tokens is None:
        return SpotifyStatusSchema(connected=False)
    return SpotifyStatusSchema(connected=True, expires_at=tokens.expires_at)


@router.delete("/spotify/connection", status_code=204)
async def disconnect(current_user: CurrentUserDep, users: UsersRepoDep) -> Response:
    await users.clear_spotify_tokens(current_user.user_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


@router.get("/spotify/now-playing", response_model=TrackMetadata)
async def now_playing(client: SpotifyClientDep) -> TrackMetadata:
    track = await client.get_currently_playing()
    if track is None:
        raise SpotifyError(SpotifyErrorCode.NO_TRACK_PLAYING)
    return track


@router.get("/spotify/tracks/lookup", response_model=TrackMetadata)
async def lookup_track(url: str, client: SpotifyClientDep) -> TrackMetadata:
    return await client.get_track_from_url(url)


# ---------------------------------------------------------------------------
# Playlists
# ---------------------------------------------------------------------------


@router.post("/spaces/{space_id}/playlist", response_model=PlaylistResponse, status_code=201)
async def build_week_playlist(
    ctx: SpaceContextDep,
    client: SpotifyClientDep,
    newsletters: NewslettersRepoDep,
    request: PlaylistRequest | None = None,
) -> PlaylistResponse:
    """Collect every Spotify track shared in a week into a playlist on the caller's account."""
    ctx.require(Capability.VIEW_SPACE)
    request = request or PlaylistRequest()
    week = request.week_number or ctx.space.current_week
    name = request.name or f"{ctx.space.name} · Week {week}"

    issue = await newsletters.build_issue(ctx.space, week, name)
    track_ids: list[str] = []
    for link in issue.music_urls:
        link_type, track_id = parse_spotify_url(link)
        if link_type == "track" and track_id not in track_ids:
            track_ids.append(track_id)
    if not track_ids:
        raise SpotifyError(SpotifyErrorCode.NO_SPOTIFY_RESPONSES)

    playlist = await client.build_playlist(name, track_ids, description=request.description)
    return PlaylistResponse(
        id=playlist["id"],
        name=playlist.get("name", name),
        url=playlist.get("external_urls", {}).get("spotify"),
        track_count=len(track_ids),
    )
