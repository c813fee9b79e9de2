"""Repository tests against an in-memory SQLite database."""

from __future__ import annotations

import random
import uuid
from datetime import UTC, date, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from monogram.spotify import SpotifyTokens
from monogram_service.db.models import Base
from monogram_service.db.repositories.newsletters import NewslettersRepo
from monogram_service.db.repositories.prompts import PromptsRepo
from monogram_service.db.repositories.responses import ResponsesRepo
from monogram_service.db.repositories.spaces import SpacesRepo
from monogram_service.db.repositories.users import UsersRepo


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def people(session):
    users = UsersRepo(session)
    return [
        await users.create_user(f"{name.lower()}@example.com", "password123", name, role)
        for name, role in [("Lena", "leader"), ("Milo", "member"), ("Ada", "member")]
    ]


@pytest_asyncio.fixture
async def space(session, people):
    leader, milo, ada = people
    repo = SpacesRepo(session)
    space = await repo.create_space("Sunday Letters", leader.id)
    await repo.join_space(space.id, milo.id)
    await repo.join_space(space.id, ada.id)
    return space


async def _published_prompt(session, space, curator, question="What did you notice?", **item):
    prompts = PromptsRepo(session)
    (prompt,) = await prompts.create_prompts(
        space.id, curator.id, space.current_week, [{"question": question, **item}]
    )
    await prompts.publish_prompts(space.id, space.current_week)
    await session.refresh(prompt)
    return prompt


# ---------------------------------------------------------------------------
# Spaces and rotation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_space_seeds_leader(session, people):
    leader = people[0]
    repo = SpacesRepo(session)
    space = await repo.create_space("Night Pages", leader.id, access_type="PRIVATE")

    assert space.current_curator_id == leader.id
    assert space.current_week == 1
    (membership,) = await repo.list_members(space.id)
    assert membership.role == "LEADER"
    assert membership.user.name == "Lena"
    assert [(r.user_id, r.week_number) for r in await repo.list_rotations(space.id)] == [
        (leader.id, 1)
    ]


@pytest.mark.asyncio
async def test_list_user_spaces_and_counts(session, people, space):
    repo = SpacesRepo(session)
    assert [s.id for s in await repo.list_user_spaces(people[1].id)] == [space.id]
    assert await repo.member_counts([space.id]) == {space.id: 3}
    assert await repo.member_counts([]) == {}


@pytest.mark.asyncio
async def test_join_twice_returns_none(session, people, space):
    assert await SpacesRepo(session).join_space(space.id, people[1].id) is None


@pytest.mark.asyncio
async def test_round_robin_rotation(session, people, space):
    leader, milo, ada = people
    repo = SpacesRepo(session)
    space.is_published = True
    await session.commit()

    assert await repo.rotate_curator(space.id) == milo.id
    refreshed = await repo.get_space(space.id)
    assert refreshed.current_week == 2
    assert refreshed.is_published is False

    assert await repo.rotate_curator(space.id) == ada.id
    assert await repo.rotate_curator(space.id) == leader.id
    weeks = [(r.week_number, r.user_id) for r in await repo.list_rotations(space.id)]
    assert weeks == [(4, leader.id), (3, ada.id), (2, milo.id), (1, leader.id)]


@pytest.mark.asyncio
async def test_same_join_time_orders_by_user_id(session, people, space):
    repo = SpacesRepo(session)
    joined = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
    for membership in await repo.list_members(space.id):
        membership.joined_at = joined
    await session.commit()

    expected = sorted(p.id for p in people)
    assert [m.user_id for m in await repo.list_members(space.id)] == expected

    await repo.assign_curator(space.id, expected[0])
    assert await repo.rotate_curator(space.id) == expected[1]
    assert await repo.rotate_curator(space.id) == expected[2]


@pytest.mark.asyncio
async def test_random_rotation_picks_a_member(session, people, space):
    repo = SpacesRepo(session)
    await repo.update_space(space.id, rotation_type="RANDOM")
    curator_id = await repo.rotate_curator(space.id, rng=random.Random(7))
    assert curator_id in {p.id for p in people}


@pytest.mark.asyncio
async def test_manual_rotation_writes_nothing(session, people, space):
    repo = SpacesRepo(session)
    await repo.update_space(space.id, rotation_type="MANUAL")

    assert await repo.rotate_curator(space.id) is None
    refreshed = await repo.get_space(space.id)
    assert refreshed.current_week == 1
    assert refreshed.current_curator_id == people[0].id
    assert len(await repo.list_rotations(space.id)) == 1


@pytest.mark.asyncio
async def test_assign_curator_keeps_week(session, people, space):
    repo = SpacesRepo(session)
    assert await repo.assign_curator(space.id, people[2].id) is True
    refreshed = await repo.get_space(space.id)
    assert refreshed.current_curator_id == people[2].id
    assert refreshed.current_week == 1


@pytest.mark.asyncio
async def test_assign_curator_rejects_non_member(session, people, space):
    stranger = await UsersRepo(session).create_user("zed@example.com", "password123", "Zed")
    assert await SpacesRepo(session).assign_curator(space.id, stranger.id) is False


@pytest.mark.asyncio
async def test_removing_curator_clears_it(session, people, space):
    repo = SpacesRepo(session)
    await repo.assign_curator(space.id, people[1].id)

    assert await repo.remove_member(space.id, people[1].id) is True
    assert (await repo.get_space(space.id)).current_curator_id is None
    assert await repo.remove_member(space.id, people[1].id) is False


@pytest.mark.asyncio
async def test_set_member_role(session, people, space):
    repo = SpacesRepo(session)
    membership = await repo.set_member_role(space.id, people[1].id, "CURATOR")
    assert membership.role == "CURATOR"


@pytest.mark.asyncio
async def test_delete_space_removes_children(session, people, space):
    leader, milo, _ = people
    prompt = await _published_prompt(session, space, leader)
    await ResponsesRepo(session).submit_response(prompt.id, milo.id, "gone soon")

    repo = SpacesRepo(session)
    assert await repo.delete_space(space.id) is True
    assert await repo.get_space(space.id) is None
    assert await PromptsRepo(session).get(prompt.id) is None
    assert await repo.list_members(space.id) == []


# ---------------------------------------------------------------------------
# Prompts and responses
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_prompt_limits(session, people, space):
    prompts = PromptsRepo(session)
    with pytest.raises(ValueError):
        await prompts.create_prompts(space.id, people[0].id, 1, [])
    with pytest.raises(ValueError):
        await prompts.create_prompts(
            space.id, people[0].id, 1, [{"question": f"Q{i}"} for i in range(11)]
        )


@pytest.mark.asyncio
async def test_prompts_hidden_until_published(session, people, space):
    prompts = PromptsRepo(session)
    await prompts.create_prompts(
        space.id, people[0].id, 1, [{"question": "Second?", "order": 2}, {"question": "First?", "order": 1}]
    )
    assert await prompts.list_week_prompts(space.id, 1) == []
    drafts = await prompts.list_week_prompts(space.id, 1, published_only=False)
    assert [p.question for p in drafts] == ["First?", "Second?"]

    assert await prompts.publish_prompts(space.id, 1) == 2
    assert len(await prompts.list_week_prompts(space.id, 1)) == 2


@pytest.mark.asyncio
async def test_submission_count_and_streak(session, people, space):
    leader, milo, _ = people
    prompt = await _published_prompt(session, space, leader)
    responses = ResponsesRepo(session)
    monday = date(2026, 3, 2)

    draft = await responses.submit_response(prompt.id, milo.id, "half", is_draft=True, today=monday)
    first = await responses.submit_response(prompt.id, milo.id, "whole", today=monday)
    again = await responses.submit_response(
        prompt.id, milo.id, "edited", today=monday + timedelta(days=1)
    )

    assert draft.id == first.id == again.id
    membership = await SpacesRepo(session).get_membership(space.id, milo.id)
    assert membership.total_submissions == 1
    user = await UsersRepo(session).get(milo.id)
    assert (user.current_streak, user.longest_streak) == (2, 2)
    assert user.last_active_date == monday + timedelta(days=1)


@pytest.mark.asyncio
async def test_resubmitting_after_draft_counts_once(session, people, space):
    leader, milo, _ = people
    prompt = await _published_prompt(session, space, leader)
    responses = ResponsesRepo(session)

    first = await responses.submit_response(prompt.id, milo.id, "whole")
    submitted_at = first.submitted_at
    await responses.submit_response(prompt.id, milo.id, "rethinking", is_draft=True)
    again = await responses.submit_response(prompt.id, milo.id, "whole again")

    membership = await SpacesRepo(session).get_membership(space.id, milo.id)
    assert membership.total_submissions == 1
    assert submitted_at is not None
    assert again.submitted_at == submitted_at


@pytest.mark.asyncio
async def test_week_responses_skip_drafts(session, people, space):
    leader, milo, ada = people
    prompt = await _published_prompt(session, space, leader)
    responses = ResponsesRepo(session)
    await responses.submit_response(prompt.id, milo.id, "done")
    await responses.submit_response(prompt.id, ada.id, "not yet", is_draft=True)

    week = await responses.list_week_responses(space.id, 1)
    assert [(r.user.name, r.content) for r in week] == [("Milo", "done")]
    assert [r.content for r in await responses.list_for_prompt(prompt.id)] == ["done"]
    assert [r.prompt.question for r in await responses.list_user_writings(space.id, milo.id)] == [
        prompt.question
    ]
    assert await responses.list_user_writings(space.id, ada.id) == []


@pytest.mark.asyncio
async def test_delete_prompt_removes_responses(session, people, space):
    leader, milo, _ = people
    prompt = await _published_prompt(session, space, leader)
    response = await ResponsesRepo(session).submit_response(prompt.id, milo.id, "bye")

    assert await PromptsRepo(session).delete_prompt(prompt.id) is True
    assert await ResponsesRepo(session).get(response.id) is None


# ---------------------------------------------------------------------------
# Newsletters
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_generate_and_publish_newsletter(session, people, space):
    leader, milo, _ = people
    prompt = await _published_prompt(
        session, space, leader, music_url="https://open.spotify.com/track/aaa111"
    )
    await ResponsesRepo(session).submit_response(prompt.id, milo.id, "Under the oak.")
    repo = NewslettersRepo(session)

    newsletter = await repo.generate_newsletter(space.id, 1, leader.id, "Issue One", theme="Rest")
    assert newsletter.is_published is False
    assert "Curated by Lena" in newsletter.body
    assert "### Milo" in newsletter.body
    assert "Listen: https://open.spotify.com/track/aaa111" in newsletter.body
    assert await repo.list_space_newsletters(space.id, published_only=True) == []

    published = await repo.publish_newsletter(newsletter.id, public_url="https://monogram.example/n/1")
    assert published.is_published is True
    assert published.published_at is not None
    assert (await SpacesRepo(session).get_space(space.id)).is_published is True
    assert [n.id for n in await repo.list_space_newsletters(space.id, published_only=True)] == [
        newsletter.id
    ]


@pytest.mark.asyncio
async def test_generate_for_missing_space(session, people):
    assert await NewslettersRepo(session).generate_newsletter(uuid.uuid4(), 1, None, "None") is None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_settings_created_lazily(session, people):
    users = UsersRepo(session)
    settings = await users.get_settings(people[1].id)
    assert settings.theme == "system"
    updated = await users.update_settings(people[1].id, theme="dark", unknown="ignored")
    assert updated.theme == "dark"


@pytest.mark.asyncio
async def test_spotify_tokens_round_trip(session, people):
    users = UsersRepo(session)
    milo = people[1]
    assert await users.get_spotify_tokens(milo.id) is None

    expires_at = datetime.now(UTC) + timedelta(hours=1)
    await users.save_spotify_tokens(
        milo.id, SpotifyTokens(access_token="a", refresh_token="r", expires_at=expires_at)
    )
    tokens = await users.get_spotify_tokens(milo.id)
    assert (tokens.access_token, tokens.refresh_token) == ("a", "r")
    assert not tokens.is_expired()

    await users.clear_spotify_tokens(milo.id)
    assert await users.get_spotify_tokens(milo.id) is None
