"""Tests for curator rotation."""

import random

from monogram.rotation import RotationType, select_next_curator

MEMBERS = ["a", "b", "c"]


def test_round_robin_advances():
    assert select_next_curator(RotationType.ROUND_ROBIN, MEMBERS, "a") == "b"
    assert select_next_curator(RotationType.ROUND_ROBIN, MEMBERS, "b") == "c"


def test_round_robin_wraps():
    assert select_next_curator(RotationType.ROUND_ROBIN, MEMBERS, "c") == "a"


def test_round_robin_starts_at_first_when_no_curator():
    assert select_next_curator(RotationType.ROUND_ROBIN, MEMBERS, None) == "a"


def test_round_robin_starts_at_first_when_curator_left():
    assert select_next_curator(RotationType.ROUND_ROBIN, MEMBERS, "gone") == "a"


def test_single_member_keeps_curator():
    assert select_next_curator(RotationType.ROUND_ROBIN, ["a"], "a") == "a"


def test_random_picks_a_member():
    rng = random.Random(7)
    for _ in range(20):
        assert select_next_curator(RotationType.RANDOM, MEMBERS, "a", rng=rng) in MEMBERS


def test_random_is_deterministic_with_seeded_rng():
    first = select_next_curator(RotationType.RANDOM, MEMBERS, None, rng=random.Random(3))
    second = select_next_curator(RotationType.RANDOM, MEMBERS, None, rng=random.Random(3))
    assert first == second


def test_manual_never_picks():
    assert select_next_curator(RotationType.MANUAL, MEMBERS, "a") is None


def test_empty_members():
    assert select_next_curator(RotationType.ROUND_ROBIN, [], None) is None
    assert select_next_curator(RotationType.RANDOM, [], None) is None


def test_string_rotation_type():
    assert select_next_curator("ROUND_ROBIN", MEMBERS, "a") == "b"
