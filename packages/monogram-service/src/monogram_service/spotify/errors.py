"""HTTP mapping for Spotify failures."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from monogram.spotify import SpotifyError, SpotifyErrorCode

HTTP_STATUS: dict[SpotifyErrorCode, int] = {
    SpotifyErrorCode.OAUTH_DENIED: 400,
    SpotifyErrorCode.OAUTH_FAILED: 400,
    SpotifyErrorCode.OAUTH_INVALID_STATE: 400,
    SpotifyErrorCode.NO_TRACK_PLAYING: 404,
    SpotifyErrorCode.INVALID_URL: 400,
    SpotifyErrorCode.TRACK_NOT_FOUND: 404,
    SpotifyErrorCode.RATE_LIMITED: 429,
    SpotifyErrorCode.NETWORK_ERROR: 502,
    SpotifyErrorCode.API_ERROR: 502,
    # Reconnect required; 401 is reserved for the app's own session
    SpotifyErrorCode.TOKEN_EXPIRED: 409,
    SpotifyErrorCode.TOKEN_INVALID: 409,
    SpotifyErrorCode.TOKEN_REFRESH_FAILED: 409,
    SpotifyErrorCode.PLAYLIST_CREATE_FAILED: 502,
    SpotifyErrorCode.PLAYLIST_ADD_TRACKS_FAILED: 502,
    SpotifyErrorCode.NO_SPOTIFY_RESPONSES: 404,
    SpotifyErrorCode.INSUFFICIENT_SCOPE: 403,
    SpotifyErrorCode.NOT_CONNECTED: 409,
    SpotifyErrorCode.UNKNOWN_ERROR: 500,
}


async def spotify_error_handler(request: Request, exc: SpotifyError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS.get(exc.code, 500),
        content={"detail": exc.message, "code": exc.code.value},
    )
