"""Spotify constants, token model and error codes."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel

AUTH_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"
API_BASE_URL = "https://api.spotify.com/v1"
SCOPES = " ".join([
    "user-read-currently-playing",
    "user-read-playback-state",
    "playlist-modify-public",
    "playlist-modify-private",
])

# Tokens this close to expiry are treated as already expired.
EXPIRY_BUFFER = timedelta(minutes=5)
# Spotify accepts at most this many URIs per "add tracks" call.
PLAYLIST_CHUNK_SIZE = 100


class SpotifyErrorCode(str, Enum):
    OAUTH_DENIED = "OAUTH_DENIED"
    OAUTH_FAILED = "OAUTH_FAILED"
    OAUTH_INVALID_STATE = "OAUTH_INVALID_STATE"
    NO_TRACK_PLAYING = "NO_TRACK_PLAYING"
    INVALID_URL = "INVALID_URL"
    TRACK_NOT_FOUND = "TRACK_NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_REFRESH_FAILED = "TOKEN_REFRESH_FAILED"
    PLAYLIST_CREATE_FAILED = "PLAYLIST_CREATE_FAILED"
    PLAYLIST_ADD_TRACKS_FAILED = "PLAYLIST_ADD_TRACKS_FAILED"
    NO_SPOTIFY_RESPONSES = "NO_SPOTIFY_RESPONSES"
    INSUFFICIENT_SCOPE = "INSUFFICIENT_SCOPE"
    NOT_CONNECTED = "NOT_CONNECTED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: dict[SpotifyErrorCode, str] = {
    SpotifyErrorCode.OAUTH_DENIED: "Spotify connection was cancelled. Please try again to use Now Playing.",
    SpotifyErrorCode.OAUTH_FAILED: "Failed to connect to Spotify. Please try again.",
    SpotifyErrorCode.OAUTH_INVALID_STATE: "Invalid OAuth state. Please try connecting again.",
    SpotifyErrorCode.NO_TRACK_PLAYING: "No track currently playing. Try pasting a Spotify URL instead.",
    SpotifyErrorCode.INVALID_URL: "Invalid Spotify URL. Please paste a valid track, album, or playlist link.",
    SpotifyErrorCode.TRACK_NOT_FOUND: "Track not found. Please check the URL and try again.",
    SpotifyErrorCode.RATE_LIMITED: "Too many requests. Please try again in a few minutes.",
    SpotifyErrorCode.NETWORK_ERROR: "Connection failed. Please check your internet connection.",
    SpotifyErrorCode.API_ERROR: "Spotify API error. Please try again later.",
    SpotifyErrorCode.TOKEN_EXPIRED: "Your Spotify session expired. Please reconnect.",
    SpotifyErrorCode.TOKEN_INVALID: "Invalid Spotify token. Please reconnect your account.",
    SpotifyErrorCode.TOKEN_REFRESH_FAILED: "Failed to refresh Spotify session. Please reconnect.",
    SpotifyErrorCode.PLAYLIST_CREATE_FAILED: "Failed to create playlist. Please try again.",
    SpotifyErrorCode.PLAYLIST_ADD_TRACKS_FAILED: "Failed to add tracks to playlist. Please try again.",
    SpotifyErrorCode.NO_SPOTIFY_RESPONSES: "No Spotify responses found for this week.",
    SpotifyErrorCode.INSUFFICIENT_SCOPE: "Missing required permissions. Please reconnect and approve all permissions.",
    SpotifyErrorCode.NOT_CONNECTED: "Spotify not connected. Please connect your account first.",
    SpotifyErrorCode.UNKNOWN_ERROR: "An unexpected error occurred. Please try again.",
}


class SpotifyError(Exception):
    """A Spotify failure carrying a stable code and a user-facing message."""

    def __init__(self, code: SpotifyErrorCode, message: str | None = None) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        super().__init__(self.message)


class SpotifyTokens(BaseModel):
    access_token: str
    refresh_token: str
    expires_at: datetime
    token_type: str = "Bearer"

    @classmethod
    def from_token_response(
        cls, data: dict, previous_refresh_token: str | None = None
    ) -> SpotifyTokens:
        """Build tokens from the accounts service JSON.

        Refresh responses may omit ``refresh_token``; the previous one stays valid.
        """
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or previous_refresh_token or "",
            expires_at=datetime.now(UTC) + timedelta(seconds=int(data["expires_in"])),
            token_type=data.get("token_type", "Bearer"),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at - now < EXPIRY_BUFFER


class TrackMetadata(BaseModel):
    id: str
    name: str
    artist: str
    album: str
    album_art: str = ""
    url: str
    duration_ms: int
    release_year: str | None = None
