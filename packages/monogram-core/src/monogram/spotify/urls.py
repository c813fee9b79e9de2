"""Spotify link parsing and track formatting helpers."""

from __future__ import annotations

import re
from typing import Any, Literal

from monogram.spotify.types import TrackMetadata

LinkType = Literal["track", "album", "playlist"]

_PATTERNS: list[tuple[LinkType, re.Pattern[str]]] = [
    ("track", re.compile(r"^https?://open\.spotify\.com/track/([a-zA-Z0-9]+)")),
    ("track", re.compile(r"^spotify:track:([a-zA-Z0-9]+)$")),
    ("album", re.compile(r"^https?://open\.spotify\.com/album/([a-zA-Z0-9]+)")),
    ("album", re.compile(r"^spotify:album:([a-zA-Z0-9]+)$")),
    ("playlist", re.compile(r"^https?://open\.spotify\.com/playlist/([a-zA-Z0-9]+)")),
    ("playlist", re.compile(r"^spotify:playlist:([a-zA-Z0-9]+)$")),
]


def parse_spotify_url(url: str) -> tuple[LinkType | None, str | None]:
    """Return ``(type, id)`` for a Spotify web link or URI, else ``(None, None)``."""
    url = url.strip()
    for link_type, pattern in _PATTERNS:
        match = pattern.match(url)
        if match:
            return link_type, match.group(1)
    return None, None


def is_valid_spotify_url(url: str) -> bool:
    return parse_spotify_url(url)[1] is not None


def track_uri(track_id: str) -> str:
    return f"spotify:track:{track_id}"


def format_duration(ms: int) -> str:
    """Milliseconds to ``M:SS``."""
    minutes, seconds = divmod(ms // 1000, 60)
    return f"{minutes}:{seconds:02d}"


def track_to_metadata(track: dict[str, Any]) -> TrackMetadata:
    """Flatten a Web API track object into the fields shown on a response card."""
    album = track.get("album") or {}
    images = album.get("images") or []
    release_date = album.get("release_date") or ""
    return TrackMetadata(
        id=track["id"],
        name=track["name"],
        artist=", ".join(a["name"] for a in track.get("artists", [])),
        album=album.get("name", ""),
        album_art=images[0]["url"] if images else "",
        url=track.get("external_urls", {}).get("spotify", ""),
        duration_ms=track.get("duration_ms", 0),
        release_year=release_date.split("-")[0] or None,
    )
