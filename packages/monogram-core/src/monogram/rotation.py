"""Curator rotation policy."""

from __future__ import annotations

import random
from collections.abc import Sequence
from enum import Enum


class RotationType(str, Enum):
    ROUND_ROBIN = "ROUND_ROBIN"
    RANDOM = "RANDOM"
    MANUAL = "MANUAL"


def select_next_curator(
    rotation_type: RotationType | str,
    member_ids: Sequence[str],
    current_curator_id: str | None,
    rng: random.Random | None = None,
) -> str | None:
    """Pick the next curator from ``member_ids`` (ordered by join time).

    Returns None for MANUAL rotation and for an empty member list; the caller
    then leaves the current curator untouched.
    """
    rotation_type = RotationType(rotation_type)
    if rotation_type is RotationType.MANUAL or not member_ids:
        return None

    if rotation_type is RotationType.RANDOM:
        rng = rng or random.Random()
        return member_ids[rng.randrange(len(member_ids))]

    try:
        index = list(member_ids).index(current_curator_id)
    except ValueError:
        index = -1
    return member_ids[(index + 1) % len(member_ids)]
