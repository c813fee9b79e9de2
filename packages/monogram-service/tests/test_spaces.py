"""Space, membership and rotation endpoint tests."""

from __future__ import annotations

from fakes import auth_headers

# ---------------------------------------------------------------------------
# Spaces
# ---------------------------------------------------------------------------


def test_create_space_as_leader(client, store, leader):
    response = client.post(
        "/api/v1/spaces",
        json={"name": "Night Pages", "access_type": "PRIVATE", "publish_day": 5},
        headers=auth_headers(leader),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Night Pages"
    assert data["leader_id"] == str(leader.id)
    assert data["current_curator_id"] == str(leader.id)
    assert data["current_week"] == 1
    assert data["role"] == "leader"
    assert data["member_count"] == 1
    assert len(store.rotations) == 1


def test_create_space_forbidden_for_members(client, member):
    response = client.post(
        "/api/v1/spaces", json={"name": "Mine"}, headers=auth_headers(member)
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "Only leaders can create new spaces"


def test_create_space_validates_publish_day(client, leader):
    response = client.post(
        "/api/v1/spaces", json={"name": "X", "publish_day": 7}, headers=auth_headers(leader)
    )
    assert response.status_code == 422


def test_list_spaces(client, store, space, member, leader):
    store.add_space(leader, name="Leader Only")
    response = client.get("/api/v1/spaces", headers=auth_headers(member))
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["spaces"][0]["id"] == str(space.id)
    assert data["spaces"][0]["member_count"] == 2


def test_get_space_as_member(client, space, member):
    response = client.get(f"/api/v1/spaces/{space.id}", headers=auth_headers(member))
    assert response.status_code == 200
    assert response.json()["role"] == "member"


def test_get_public_space_preview(client, space, outsider):
    response = client.get(f"/api/v1/spaces/{space.id}", headers=auth_headers(outsider))
    assert response.status_code == 200
    assert response.json()["role"] is None


def test_get_private_space_hidden_from_outsiders(client, space, outsider):
    space.access_type = "PRIVATE"
    response = client.get(f"/api/v1/spaces/{space.id}", headers=auth_headers(outsider))
    assert response.status_code == 403
    assert response.json()["detail"] == "You must be a member to view this space"


def test_get_unknown_space(client, member):
    response = client.get(
        "/api/v1/spaces/00000000-0000-0000-0000-000000000000", headers=auth_headers(member)
    )
    assert response.status_code == 404


def test_update_space(client, space, leader):
    response = client.patch(
        f"/api/v1/spaces/{space.id}",
        json={"description": "Slow writing", "rotation_type": "RANDOM"},
        headers=auth_headers(leader),
    )
    assert response.status_code == 200
    assert response.json()["description"] == "Slow writing"
    assert space.rotation_type == "RANDOM"


def test_update_space_clears_description(client, space, leader):
    headers = auth_headers(leader)
    client.patch(f"/api/v1/spaces/{space.id}", json={"description": "Slow writing"}, headers=headers)

    response = client.patch(
        f"/api/v1/spaces/{space.id}",
        json={"description": None, "name": None},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["description"] is None
    assert response.json()["name"] == "Sunday Letters"
    assert space.description is None


def test_markup_only_space_name_rejected(client, space, leader):
    headers = auth_headers(leader)
    created = client.post("/api/v1/spaces", json={"name": "<b></b>"}, headers=headers)
    assert created.status_code == 422

    updated = client.patch(
        f"/api/v1/spaces/{space.id}", json={"name": "<i> </i>"}, headers=headers
    )
    assert updated.status_code == 422
    assert space.name == "Sunday Letters"


def test_update_space_forbidden_for_member(client, space, member):
    response = client.patch(
        f"/api/v1/spaces/{space.id}", json={"name": "Taken"}, headers=auth_headers(member)
    )
    assert response.status_code == 403


def test_curator_cannot_change_access_settings(client, store, space, member):
    store.memberships[(space.id, member.id)].role = "CURATOR"
    headers = auth_headers(member)

    assert client.patch(
        f"/api/v1/spaces/{space.id}", json={"name": "Renamed"}, headers=headers
    ).status_code == 200
    response = client.patch(
        f"/api/v1/spaces/{space.id}", json={"access_type": "PRIVATE"}, headers=headers
    )
    assert response.status_code == 403
    assert space.access_type == "PUBLIC"


def test_delete_space(client, store, space, leader, member):
    assert client.delete(
        f"/api/v1/spaces/{space.id}", headers=auth_headers(member)
    ).status_code == 403
    assert client.delete(
        f"/api/v1/spaces/{space.id}", headers=auth_headers(leader)
    ).status_code == 204
    assert space.id not in store.spaces


def test_permissions_for_member(client, space, member):
    response = client.get(f"/api/v1/spaces/{space.id}/permissions", headers=auth_headers(member))
    assert response.status_code == 200
    assert response.json() == {
        "role": "member",
        "capabilities": ["canSubmitResponse", "canViewSpace"],
    }


def test_permissions_for_current_curator(client, space, leader, member):
    space.current_curator_id = member.id
    response = client.get(f"/api/v1/spaces/{space.id}/permissions", headers=auth_headers(member))
    data = response.json()
    assert data["role"] == "curator"
    assert "canSetQuestions" in data["capabilities"]
    assert "canManageMembers" not in data["capabilities"]


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


def test_join_public_space(client, store, space, outsider):
    response = client.post(f"/api/v1/spaces/{space.id}/join", headers=auth_headers(outsider))
    assert response.status_code == 200
    assert response.json()["member_count"] == 3
    assert (space.id, outsider.id) in store.memberships


def test_join_twice(client, space, member):
    response = client.post(f"/api/v1/spaces/{space.id}/join", headers=auth_headers(member))
    assert response.status_code == 409


def test_join_private_space_requires_invite(client, store, space, outsider):
    space.access_type = "PRIVATE"
    headers = auth_headers(outsider)

    response = client.post(
        f"/api/v1/spaces/{space.id}/join", json={"invite_code": "guess"}, headers=headers
    )
    assert response.status_code == 403

    response = client.post(
        f"/api/v1/spaces/{space.id}/join", json={"invite_code": str(space.id)}, headers=headers
    )
    assert response.status_code == 200
    assert (space.id, outsider.id) in store.memberships


def test_leave_space(client, store, space, member):
    response = client.post(f"/api/v1/spaces/{space.id}/leave", headers=auth_headers(member))
    assert response.status_code == 204
    assert (space.id, member.id) not in store.memberships


def test_leader_cannot_leave(client, space, leader):
    response = client.post(f"/api/v1/spaces/{space.id}/leave", headers=auth_headers(leader))
    assert response.status_code == 400


def test_leave_when_not_member(client, space, outsider):
    response = client.post(f"/api/v1/spaces/{space.id}/leave", headers=auth_headers(outsider))
    assert response.status_code == 404


def test_list_members(client, space, member):
    response = client.get(f"/api/v1/spaces/{space.id}/members", headers=auth_headers(member))
    assert response.status_code == 200
    assert [(m["name"], m["role"]) for m in response.json()] == [
        ("Lena", "LEADER"),
        ("Milo", "MEMBER"),
    ]


def test_list_members_forbidden_for_outsider(client, space, outsider):
    response = client.get(f"/api/v1/spaces/{space.id}/members", headers=auth_headers(outsider))
    assert response.status_code == 403


def test_promote_member_to_curator(client, store, space, leader, member):
    response = client.patch(
        f"/api/v1/spaces/{space.id}/members/{member.id}",
        json={"role": "CURATOR"},
        headers=auth_headers(leader),
    )
    assert response.status_code == 200
    assert response.json()["role"] == "CURATOR"
    assert store.memberships[(space.id, member.id)].role == "CURATOR"


def test_cannot_promote_to_leader(client, space, leader, member):
    response = client.patch(
        f"/api/v1/spaces/{space.id}/members/{member.id}",
        json={"role": "LEADER"},
        headers=auth_headers(leader),
    )
    assert response.status_code == 400


def test_promote_unknown_member(client, space, leader, outsider):
    response = client.patch(
        f"/api/v1/spaces/{space.id}/members/{outsider.id}",
        json={"role": "CURATOR"},
        headers=auth_headers(leader),
    )
    assert response.status_code == 404


def test_remove_member_clears_curator(client, store, space, leader, member):
    space.current_curator_id = member.id
    response = client.delete(
        f"/api/v1/spaces/{space.id}/members/{member.id}", headers=auth_headers(leader)
    )
    assert response.status_code == 204
    assert space.current_curator_id is None


def test_leader_cannot_be_removed(client, space, leader):
    response = client.delete(
        f"/api/v1/spaces/{space.id}/members/{leader.id}", headers=auth_headers(leader)
    )
    assert response.status_code == 400


def test_member_cannot_remove_others(client, space, leader, member):
    response = client.delete(
        f"/api/v1/spaces/{space.id}/members/{leader.id}", headers=auth_headers(member)
    )
    assert response.status_code == 403


# ---------------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------------


def test_rotate_round_robin(client, space, leader, member):
    space.is_published = True
    response = client.post(f"/api/v1/spaces/{space.id}/rotate", headers=auth_headers(leader))
    assert response.status_code == 200
    data = response.json()
    assert data["rotated"] is True
    assert data["curator_id"] == str(member.id)
    assert data["space"]["current_week"] == 2
    assert data["space"]["is_published"] is False

    data = client.post(f"/api/v1/spaces/{space.id}/rotate", headers=auth_headers(leader)).json()
    assert data["curator_id"] == str(leader.id)
    assert data["space"]["current_week"] == 3


def test_rotate_manual_leaves_space_alone(client, space, leader):
    space.rotation_type = "MANUAL"
    response = client.post(f"/api/v1/spaces/{space.id}/rotate", headers=auth_headers(leader))
    data = response.json()
    assert data["rotated"] is False
    assert data["curator_id"] is None
    assert data["space"]["current_week"] == 1


def test_rotate_forbidden_for_member(client, space, member):
    response = client.post(f"/api/v1/spaces/{space.id}/rotate", headers=auth_headers(member))
    assert response.status_code == 403


def test_assign_curator(client, store, space, leader, member):
    response = client.put(
        f"/api/v1/spaces/{space.id}/curator",
        json={"user_id": str(member.id)},
        headers=auth_headers(leader),
    )
    assert response.status_code == 200
    assert response.json()["current_curator_id"] == str(member.id)
    assert response.json()["current_week"] == 1


def test_assign_curator_requires_membership(client, space, leader, outsider):
    response = client.put(
        f"/api/v1/spaces/{space.id}/curator",
        json={"user_id": str(outsider.id)},
        headers=auth_headers(leader),
    )
    assert response.status_code == 400


def test_rotation_history(client, space, leader, member):
    client.post(f"/api/v1/spaces/{space.id}/rotate", headers=auth_headers(leader))
    response = client.get(f"/api/v1/spaces/{space.id}/rotations", headers=auth_headers(member))
    assert response.status_code == 200
    assert [(r["week_number"], r["user_id"]) for r in response.json()] == [
        (2, str(member.id)),
        (1, str(leader.id)),
    ]
