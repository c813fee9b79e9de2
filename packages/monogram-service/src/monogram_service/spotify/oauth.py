"""Spotify authorization-code flow: authorize URL, code exchange, refresh."""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
import structlog

from monogram.spotify import SpotifyError, SpotifyErrorCode, SpotifyTokens
from monogram.spotify.types import AUTH_URL, SCOPES, TOKEN_URL
from monogram_service.settings import settings

log = structlog.get_logger(__name__)


def build_authorize_url(state: str) -> str:
    params = {
        "client_id": settings.spotify_client_id,
        "response_type": "code",
        "redirect_uri": settings.spotify_redirect_uri,
        "scope": SCOPES,
        "state": state,
        "show_dialog": "false",
    }
    return f"{AUTH_URL}?{urlencode(params)}"


async def _token_request(
    data: dict[str, str], transport: httpx.AsyncBaseTransport | None
) -> httpx.Response:
    try:
        async with httpx.AsyncClient(
            timeout=settings.spotify_timeout_seconds, transport=transport
        ) as client:
            return await client.post(
                TOKEN_URL,
                data=data,
                auth=(settings.spotify_client_id, settings.spotify_client_secret),
            )
    except httpx.HTTPError as exc:
        log.warning("spotify_token_network_error", grant_type=data["grant_type"], error=str(exc))
        raise SpotifyError(SpotifyErrorCode.NETWORK_ERROR) from exc


async def exchange_code(
    code: str, transport: httpx.AsyncBaseTransport | None = None
) -> SpotifyTokens:
    """Trade the callback ``code`` for an access/refresh token pair."""
    resp = await _token_request(
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": settings.spotify_redirect_uri,
        },
        transport,
    )
    if resp.is_error:
        log.warning("spotify_code_exchange_failed", status=resp.status_code)
        raise SpotifyError(SpotifyErrorCode.OAUTH_FAILED)
    return SpotifyTokens.from_token_response(resp.json())


async def refresh_tokens(
    refresh_token: str, transport: httpx.AsyncBaseTransport | None = None
) -> SpotifyTokens:
    resp = await _token_request(
        {"grant_type": "refresh_token", "refresh_token": refresh_token}, transport
    )
    if resp.is_error:
        log.warning("spotify_token_refresh_failed", status=resp.status_code)
        raise SpotifyError(SpotifyErrorCode.TOKEN_REFRESH_FAILED)
    return SpotifyTokens.from_token_response(resp.json(), previous_refresh_token=refresh_token)
