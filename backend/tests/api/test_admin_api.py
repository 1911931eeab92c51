from uuid import uuid4

import pytest

ADMIN = "/api/v1/admin"


def _as(user):
    return {"X-User-Id": str(user.id)}


@pytest.mark.asyncio
async def test_assign_and_remove_club_admin(api_client, repo):
    root = repo.seed_user("root@example.com", is_super_admin=True)
    alice = repo.seed_user("alice@example.com")
    club = repo.seed_club()

    assigned = await api_client.post(f"{ADMIN}/assign-club-admin", json={"email": "Alice@Example.com", "clubId": str(club.id)}, headers=_as(root))
    assert assigned.status_code == 200
    assert assigned.json()["is_admin"] is True
    assert assigned.json()["admin_of"] == [str(club.id)]

    admins = await api_client.get(f"{ADMIN}/club-admins/{club.id}", headers=_as(root))
    assert [item["email"] for item in admins.json()["items"]] == ["alice@example.com"]

    removed = await api_client.post(f"{ADMIN}/remove-club-admin", json={"userId": str(alice.id), "clubId": str(club.id)}, headers=_as(root))
    assert removed.status_code == 200
    assert removed.json()["is_admin"] is False
    assert repo.admin_edges == []


@pytest.mark.asyncio
async def test_admin_routes_require_super_admin(api_client, repo):
    club = repo.seed_club()
    admin = repo.seed_user("admin@example.com")
    repo.make_admin(admin.id, club.id)

    assign = await api_client.post(f"{ADMIN}/assign-club-admin", json={"email": "admin@example.com", "clubId": str(club.id)}, headers=_as(admin))
    users = await api_client.get(f"{ADMIN}/users", headers=_as(admin))
    anonymous = await api_client.get(f"{ADMIN}/users")

    assert assign.status_code == 403
    assert users.status_code == 403
    assert anonymous.status_code == 401


@pytest.mark.asyncio
async def test_assign_unknown_user_or_club(api_client, repo):
    root = repo.seed_user("root@example.com", is_super_admin=True)
    club = repo.seed_club()

    unknown_user = await api_client.post(f"{ADMIN}/assign-club-admin", json={"email": "ghost@example.com", "clubId": str(club.id)}, headers=_as(root))
    unknown_club = await api_client.post(f"{ADMIN}/assign-club-admin", json={"email": "root@example.com", "clubId": str(uuid4())}, headers=_as(root))

    assert unknown_user.status_code == 404
    assert unknown_user.json()["detail"]["kind"] == "user_not_found"
    assert unknown_club.status_code == 404
    assert unknown_club.json()["detail"]["kind"] == "club_not_found"


@pytest.mark.asyncio
async def test_list_users(api_client, repo):
    root = repo.seed_user("root@example.com", is_super_admin=True)
    repo.seed_user("zed@example.com")

    resp = await api_client.get(f"{ADMIN}/users", headers=_as(root))

    assert resp.status_code == 200
    assert resp.json()["count"] == 2
