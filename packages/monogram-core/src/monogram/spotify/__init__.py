"""Spotify helpers shared by the service and the client."""

from __future__ import annotations

from monogram.spotify.types import (
    ERROR_MESSAGES,
    SpotifyError,
    SpotifyErrorCode,
    SpotifyTokens,
    TrackMetadata,
)
from monogram.spotify.urls import (
    format_duration,
    is_valid_spotify_url,
    parse_spotify_url,
    track_to_metadata,
    track_uri,
)

__all__ = [
    "ERROR_MESSAGES",
    "SpotifyError",
    "SpotifyErrorCode",
    "SpotifyTokens",
    "TrackMetadata",
    "format_duration",
    "is_valid_spotify_url",
    "parse_spotify_url",
    "track_to_metadata",
    "track_uri",
]
