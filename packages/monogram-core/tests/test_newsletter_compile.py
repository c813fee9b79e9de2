"""Tests for newsletter compilation."""

from monogram.newsletter import (
    NewsletterEntry,
    NewsletterIssue,
    NewsletterSection,
    compile_newsletter,
)


def _issue(**overrides):
    fields = dict(
        space_name="Sunday Letters",
        week_number=4,
        title="Week 4",
        curator_name="Ada",
        theme="Beginnings",
        footer_note="See you next week",
        sections=[
            NewsletterSection(
                question="Second question",
                order=1,
                entries=[],
            ),
            NewsletterSection(
                question="First question",
                order=0,
                music_url="https://open.spotify.com/track/abc",
                entries=[
                    NewsletterEntry(author="Grace", content="Hello there"),
                    NewsletterEntry(
                        author="Linus",
                        content="A song",
                        music_url="https://open.spotify.com/track/def",
                    ),
                ],
            ),
        ],
    )
    fields.update(overrides)
    return NewsletterIssue(**fields)


def test_header_and_footer():
    body = compile_newsletter(_issue())
    assert body.startswith("# Week 4\n\n*Sunday Letters · Week 4*")
    assert "Curated by Ada" in body
    assert "> Beginnings" in body
    assert body.rstrip().endswith("See you next week")


def test_sections_follow_prompt_order():
    body = compile_newsletter(_issue())
    assert body.index("## First question") < body.index("## Second question")


def test_empty_section_is_listed():
    body = compile_newsletter(_issue())
    assert "_No responses this week._" in body


def test_entries_rendered_with_author():
    body = compile_newsletter(_issue())
    assert "### Grace\n\nHello there" in body


def test_optional_header_parts_omitted():
    body = compile_newsletter(_issue(curator_name=None, theme=None, footer_note=None))
    assert "Curated by" not in body
    assert "---" not in body


def test_counts_and_music_urls():
    issue = _issue()
    assert issue.response_count == 2
    assert issue.music_urls == [
        "https://open.spotify.com/track/abc",
        "https://open.spotify.com/track/def",
    ]
