"""Tests for writing exports."""

import json
from datetime import UTC, date, datetime

import pytest

from monogram.export import ExportFormat, Writing, export_filename, render_export

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
WRITINGS = [
    Writing(week=1, written_on=date(2024, 1, 7), prompt="What did you notice?", content="Snow."),
    Writing(week=3, written_on=date(2024, 1, 21), prompt="What are you reading?", content="Maps."),
]


def test_filename_replaces_whitespace():
    assert export_filename("Sunday  Letters club", ExportFormat.MARKDOWN) == (
        "Sunday-Letters-club-writings.md"
    )


def test_markdown_newest_week_first():
    result = render_export("Sunday Letters", WRITINGS, "markdown", now=NOW)
    assert result.content_type == "text/markdown"
    assert result.filename == "Sunday-Letters-writings.md"
    assert result.content.startswith("# Sunday Letters\n\nExported on 2024-05-01\n\n---\n\n")
    assert result.content.index("## Week 3") < result.content.index("## Week 1")
    assert "**Date:** Jan 21, 2024" in result.content
    assert "**Prompt:** What are you reading?" in result.content


def test_markdown_without_prompts_or_dates():
    result = render_export(
        "S", WRITINGS, ExportFormat.MARKDOWN, include_prompts=False, include_dates=False, now=NOW
    )
    assert "**Prompt:**" not in result.content
    assert "**Date:**" not in result.content
    assert "Snow." in result.content


def test_json_shape():
    result = render_export("S", WRITINGS, "json", include_dates=False, now=NOW)
    data = json.loads(result.content)
    assert result.filename == "S-writings.json"
    assert data["spaceName"] == "S"
    assert data["options"] == {"includePrompts": True, "includeDates": False}
    assert data["writings"][0] == {"week": 3, "prompt": "What are you reading?", "content": "Maps."}


def test_pdf_is_not_supported():
    with pytest.raises(ValueError, match="Unsupported export format"):
        render_export("S", WRITINGS, "pdf")


def test_empty_export():
    result = render_export("S", [], "json", now=NOW)
    assert json.loads(result.content)["writings"] == []
