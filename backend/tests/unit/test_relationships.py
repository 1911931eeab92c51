import logging
from uuid import uuid4

import pytest

from clubhub.domain.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from clubhub.infra.auth import Identity
from clubhub.schemas import dto


@pytest.fixture
def service(services):
    return services.relationships


@pytest.fixture
def super_admin(repo):
    return Identity.from_user(repo.seed_user("root@example.com", is_super_admin=True))


@pytest.mark.asyncio
async def test_assign_club_admin_updates_both_projections(repo, service, super_admin):
    target = repo.seed_user("Alice@Example.com")
    club = repo.seed_club()

    view = await service.assign_club_admin(super_admin, "  ALICE@example.com ", club.id)

    assert view.is_admin is True
    assert view.admin_of == [club.id]
    assert (await repo.get_club(club.id)).admins == [target.id]


@pytest.mark.asyncio
async def test_assign_club_admin_is_idempotent(repo, service, super_admin):
    repo.seed_user("alice@example.com")
    club = repo.seed_club()

    first = await service.assign_club_admin(super_admin, "alice@example.com", club.id)
    second = await service.assign_club_admin(super_admin, "alice@example.com", club.id)

    assert first.admin_of == second.admin_of == [club.id]
    assert len(repo.admin_edges) == 1


@pytest.mark.asyncio
async def test_assign_club_admin_requires_super_admin(repo, service):
    club = repo.seed_club()
    club_admin = repo.seed_user("admin@example.com")
    repo.make_admin(club_admin.id, club.id)
    repo.seed_user("alice@example.com")

    with pytest.raises(ForbiddenError):
        await service.assign_club_admin(Identity.from_user(await repo.get_user(club_admin.id)), "alice@example.com", club.id)
    with pytest.raises(UnauthorizedError):
        await service.assign_club_admin(None, "alice@example.com", club.id)
    assert repo.admin_edges == [(club_admin.id, club.id)]


@pytest.mark.asyncio
async def test_assign_club_admin_lookup_failures_abort(repo, service, super_admin):
    club = repo.seed_club()
    repo.seed_user("alice@example.com")

    with pytest.raises(NotFoundError) as missing_user:
        await service.assign_club_admin(super_admin, "ghost@example.com", club.id)
    assert missing_user.value.detail == "user_not_found"

    with pytest.raises(NotFoundError) as missing_club:
        await service.assign_club_admin(super_admin, "alice@example.com", uuid4())
    assert missing_club.value.detail == "club_not_found"
    assert repo.admin_edges == []


@pytest.mark.asyncio
async def test_remove_last_admin_edge_clears_is_admin(repo, service, super_admin):
    user = repo.seed_user("alice@example.com")
    club_a = repo.seed_club("A")
    club_b = repo.seed_club("B")
    repo.make_admin(user.id, club_a.id)
    repo.make_admin(user.id, club_b.id)

    view = await service.remove_club_admin(super_admin, user.id, club_a.id)
    assert view.is_admin is True
    assert view.admin_of == [club_b.id]

    view = await service.remove_club_admin(super_admin, user.id, club_b.id)
    assert view.is_admin is False
    assert (await repo.get_club(club_b.id)).admins == []


@pytest.mark.asyncio
async def test_remove_club_admin_unknown_user(service, super_admin):
    with pytest.raises(NotFoundError):
        await service.remove_club_admin(super_admin, uuid4(), uuid4())


@pytest.mark.asyncio
async def test_join_and_leave_keep_counter_consistent(repo, service):
    user = repo.seed_user()
    club = repo.seed_club()
    identity = Identity.from_user(user)

    await service.join_club(identity, club.id)
    view = await service.join_club(identity, club.id)
    assert view.member_of == [club.id]
    assert (await repo.get_club(club.id)).member_count == 1

    await service.leave_club(identity, club.id)
    view = await service.leave_club(identity, club.id)
    assert view.member_of == []
    assert (await repo.get_club(club.id)).member_count == 0


@pytest.mark.asyncio
async def test_join_unknown_club(repo, service):
    identity = Identity.from_user(repo.seed_user())
    with pytest.raises(NotFoundError):
        await service.join_club(identity, uuid4())
    with pytest.raises(UnauthorizedError):
        await service.join_club(None, uuid4())


@pytest.mark.asyncio
async def test_delete_event_removes_favourites(repo, service):
    club = repo.seed_club()
    admin = repo.seed_user("admin@example.com")
    repo.make_admin(admin.id, club.id)
    fan = repo.seed_user("fan@example.com")
    event = repo.seed_event(club.id)
    other = repo.seed_event(club.id, name="Other")
    await repo.add_favorite(user_id=fan.id, event_id=event.id)
    await repo.add_favorite(user_id=fan.id, event_id=other.id)

    result = await service.delete_event(Identity.from_user(await repo.get_user(admin.id)), event.id)

    assert result.id == event.id
    assert event.id not in repo.events
    assert (await repo.get_user(fan.id)).favorited_events == [other.id]


@pytest.mark.asyncio
async def test_delete_event_cleanup_failure_is_logged_not_raised(repo, service, super_admin, caplog):
    club = repo.seed_club()
    event = repo.seed_event(club.id)
    repo.fail_favorite_cleanup = True

    with caplog.at_level(logging.WARNING, logger="clubhub.domain.relationships"):
        result = await service.delete_event(super_admin, event.id)

    assert result.success is True
    assert event.id not in repo.events
    assert any(record.getMessage() == "relationships.favorite_cleanup_failed" for record in caplog.records)


@pytest.mark.asyncio
async def test_delete_event_denied_for_admin_of_other_club(repo, service):
    club_a = repo.seed_club("A")
    club_b = repo.seed_club("B")
    admin = repo.seed_user()
    repo.make_admin(admin.id, club_a.id)
    event = repo.seed_event(club_b.id)

    with pytest.raises(ForbiddenError):
        await service.delete_event(Identity.from_user(await repo.get_user(admin.id)), event.id)
    assert event.id in repo.events


@pytest.mark.asyncio
async def test_delete_missing_event(service, super_admin):
    with pytest.raises(NotFoundError):
        await service.delete_event(super_admin, uuid4())


@pytest.mark.asyncio
async def test_favourites_add_remove_and_list(repo, service):
    club = repo.seed_club()
    event = repo.seed_event(club.id, tags=["stem"])
    identity = Identity.from_user(repo.seed_user())

    view = await service.add_favorite(identity, event.id)
    view = await service.add_favorite(identity, event.id)
    assert view.favorited_events == [event.id]

    listing = await service.list_favorites(identity)
    assert listing.count == 1
    assert listing.items[0].club.name == club.name

    view = await service.remove_favorite(identity, event.id)
    assert view.favorited_events == []


@pytest.mark.asyncio
async def test_add_favorite_requires_existing_event(repo, service):
    identity = Identity.from_user(repo.seed_user())
    with pytest.raises(NotFoundError):
        await service.add_favorite(identity, uuid4())


@pytest.mark.asyncio
async def test_list_users_and_club_admins_are_super_admin_only(repo, service, super_admin):
    club = repo.seed_club()
    alice = repo.seed_user("alice@example.com")
    repo.make_admin(alice.id, club.id)

    users = await service.list_all_users(super_admin)
    assert {item.email for item in users.items} == {"alice@example.com", "root@example.com"}

    admins = await service.list_club_admins(super_admin, club.id)
    assert [item.id for item in admins.items] == [alice.id]

    with pytest.raises(ForbiddenError):
        await service.list_all_users(Identity.from_user(await repo.get_user(alice.id)))
    with pytest.raises(NotFoundError):
        await service.list_club_admins(super_admin, uuid4())


@pytest.mark.asyncio
async def test_admin_clubs_lists_administered_clubs(repo, service):
    club = repo.seed_club("Robotics")
    repo.seed_club("Chess")
    user = repo.seed_user()
    repo.make_admin(user.id, club.id)

    result = await service.admin_clubs(Identity.from_user(await repo.get_user(user.id)))
    assert [item.name for item in result.items] == ["Robotics"]


@pytest.mark.asyncio
async def test_create_club_super_admin_only(repo, service, super_admin):
    payload = dto.ClubCreateRequest(name="Film", description="Screenings", gallery=["https://cdn/x.png"])
    created = await service.create_club(super_admin, payload)
    assert created.name == "Film"
    assert created.gallery == ["https://cdn/x.png"]
    assert (await service.get_club(created.id)).member_count == 0

    with pytest.raises(ForbiddenError):
        await service.create_club(Identity.from_user(repo.seed_user("u@example.com")), payload)
