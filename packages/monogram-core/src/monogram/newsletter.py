"""Compile a week's prompts and responses into a newsletter body."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NewsletterEntry:
    author: str
    content: str
    image_url: str | None = None
    music_url: str | None = None


@dataclass(frozen=True)
class NewsletterSection:
    question: str
    order: int = 0
    image_url: str | None = None
    music_url: str | None = None
    entries: list[NewsletterEntry] = field(default_factory=list)


@dataclass(frozen=True)
class NewsletterIssue:
    space_name: str
    week_number: int
    title: str
    curator_name: str | None = None
    theme: str | None = None
    footer_note: str | None = None
    sections: list[NewsletterSection] = field(default_factory=list)

    @property
    def response_count(self) -> int:
        return sum(len(s.entries) for s in self.sections)

    @property
    def music_urls(self) -> list[str]:
        """Every music link in the issue, prompts first, in reading order."""
        urls: list[str] = []
        for section in sorted(self.sections, key=lambda s: s.order):
            if section.music_url:
                urls.append(section.music_url)
            urls.extend(e.music_url for e in section.entries if e.music_url)
        return urls


def compile_newsletter(issue: NewsletterIssue) -> str:
    """Render the issue as markdown.

    Sections follow prompt order; prompts without responses are still listed
    so readers see the full set of questions for the week.
    """
    lines = [f"# {issue.title}", "", f"*{issue.space_name} · Week {issue.week_number}*", ""]
    if issue.curator_name:
        lines += [f"Curated by {issue.curator_name}", ""]
    if issue.theme:
        lines += [f"> {issue.theme}", ""]

    for section in sorted(issue.sections, key=lambda s: s.order):
        lines += [f"## {section.question}", ""]
        if section.image_url:
            lines += [f"![prompt image]({section.image_url})", ""]
        if section.music_url:
            lines += [f"Listen: {section.music_url}", ""]
        if not section.entries:
            lines += ["_No responses this week._", ""]
            continue
        for entry in section.entries:
            lines += [f"### {entry.author}", "", entry.content, ""]
            if entry.image_url:
                lines += [f"![image from {entry.author}]({entry.image_url})", ""]
            if entry.music_url:
                lines += [f"Listen: {entry.music_url}", ""]

    if issue.footer_note:
        lines += ["---", "", issue.footer_note, ""]
    return "\n".join(lines)
