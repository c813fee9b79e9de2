"""Service test fixtures: the real app wired to in-memory repos."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make fakes importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from fakes import (  # noqa: E402
    FakeNewslettersRepo,
    FakePromptsRepo,
    FakeResponsesRepo,
    FakeSpacesRepo,
    FakeStore,
    FakeUsersRepo,
)

from monogram_service.db.deps import (  # noqa: E402
    get_newsletters_repo,
    get_prompts_repo,
    get_responses_repo,
    get_spaces_repo,
    get_users_repo,
)
from monogram_service.rest.app import create_app  # noqa: E402


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def app(store):
    """The real app with in-memory repos (no database needed)."""
    app = create_app()
    app.dependency_overrides[get_users_repo] = lambda: FakeUsersRepo(store)
    app.dependency_overrides[get_spaces_repo] = lambda: FakeSpacesRepo(store)
    app.dependency_overrides[get_prompts_repo] = lambda: FakePromptsRepo(store)
    app.dependency_overrides[get_responses_repo] = lambda: FakeResponsesRepo(store)
    app.dependency_overrides[get_newsletters_repo] = lambda: FakeNewslettersRepo(store)
    return app


@pytest.fixture
def client(app):
    # Not entered as a context manager, so the lifespan (real DB) never runs
    return TestClient(app)


@pytest.fixture
def leader(store):
    return store.add_user("lead@example.com", name="Lena", role="leader")


@pytest.fixture
def member(store):
    return store.add_user("member@example.com", name="Milo")


@pytest.fixture
def outsider(store):
    return store.add_user("outsider@example.com", name="Otto")


@pytest.fixture
def space(store, leader, member):
    space = store.add_space(leader)
    store.add_membership(space, member)
    return space
