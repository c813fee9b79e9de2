"""Markdown / JSON export of a member's writings in a space."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum


class ExportFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


_CONTENT_TYPES = {
    ExportFormat.MARKDOWN: "text/markdown",
    ExportFormat.JSON: "application/json",
}
_EXTENSIONS = {
    ExportFormat.MARKDOWN: "md",
    ExportFormat.JSON: "json",
}
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Writing:
    week: int
    written_on: date
    prompt: str
    content: str


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content_type: str
    content: str


def export_filename(space_name: str, fmt: ExportFormat) -> str:
    slug = _WHITESPACE.sub("-", space_name)
    return f"{slug}-writings.{_EXTENSIONS[fmt]}"


def _markdown(
    space_name: str,
    writings: list[Writing],
    include_prompts: bool,
    include_dates: bool,
    now: datetime,
) -> str:
    parts = [f"# {space_name}\n\n", f"Exported on {now.date().isoformat()}\n\n", "---\n\n"]
    for writing in writings:
        parts.append(f"## Week {writing.week}\n\n")
        if include_dates:
            written_on = writing.written_on
            parts.append(f"**Date:** {written_on:%b} {written_on.day}, {written_on.year}\n\n")
        if include_prompts:
            parts.append(f"**Prompt:** {writing.prompt}\n\n")
        parts.append(f"{writing.content}\n\n")
        parts.append("---\n\n")
    return "".join(parts)


def _json(
    space_name: str,
    writings: list[Writing],
    include_prompts: bool,
    include_dates: bool,
    now: datetime,
) -> str:
    entries = []
    for writing in writings:
        entry: dict[str, object] = {"week": writing.week}
        if include_dates:
            entry["date"] = writing.written_on.isoformat()
        if include_prompts:
            entry["prompt"] = writing.prompt
        entry["content"] = writing.content
        entries.append(entry)
    data = {
        "spaceName": space_name,
        "exportedAt": now.isoformat(),
        "writings": entries,
        "options": {"includePrompts": include_prompts, "includeDates": include_dates},
    }
    return json.dumps(data, indent=2)


def render_export(
    space_name: str,
    writings: list[Writing],
    fmt: ExportFormat | str = ExportFormat.MARKDOWN,
    include_prompts: bool = True,
    include_dates: bool = True,
    now: datetime | None = None,
) -> ExportFile:
    """Render writings (newest week first) into a downloadable file."""
    try:
        fmt = ExportFormat(fmt)
    except ValueError:
        raise ValueError(f"Unsupported export format: {fmt!r}") from None

    now = now or datetime.now(UTC)
    ordered = sorted(writings, key=lambda w: w.week, reverse=True)
    render = _markdown if fmt is ExportFormat.MARKDOWN else _json
    return ExportFile(
        filename=export_filename(space_name, fmt),
        content_type=_CONTENT_TYPES[fmt],
        content=render(space_name, ordered, include_prompts, include_dates, now),
    )
