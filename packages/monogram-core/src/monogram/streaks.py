"""Daily activity streak bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Streak:
    current: int
    longest: int
    last_active: date


def next_streak(
    current: int,
    longest: int,
    last_active: date | None,
    today: date,
) -> Streak:
    """Advance a streak for activity on ``today``.

    Same-day activity keeps the streak, the following day extends it, and any
    longer gap restarts it at 1.
    """
    if last_active is None:
        new_current = 1
    else:
        days_since = (today - last_active).days
        if days_since == 1:
            new_current = current + 1
        elif days_since > 1:
            new_current = 1
        else:
            new_current = max(current, 1)
    return Streak(current=new_current, longest=max(new_current, longest), last_active=today)
