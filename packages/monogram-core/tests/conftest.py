"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make _helpers importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from _helpers import make_space, make_user  # noqa: E402

from monogram.permissions import UserRole  # noqa: E402

__all__ = ["make_space", "make_user"]


@pytest.fixture
def leader():
    return make_user("leader-1", UserRole.LEADER)


@pytest.fixture
def curator():
    return make_user("curator-1", UserRole.CURATOR)


@pytest.fixture
def member():
    return make_user("member-1", UserRole.MEMBER)


@pytest.fixture
def space(leader, curator, member):
    return make_space(
        created_by=leader.id,
        curators=[curator.id],
        members=[leader.id, curator.id, member.id],
    )
