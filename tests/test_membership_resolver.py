from __future__ import annotations

from campaign.principals import PlaceholderPrincipal, PrincipalId, UserPrincipal
from campaign.services.membership import MembershipResolver
from campaign.services.placeholders import PlaceholderRegistry
from campaign.services.store import EventStore, PrincipalStore


def _resolver(db) -> MembershipResolver:
    return MembershipResolver(PrincipalStore(db))


def test_resolves_users_and_placeholders_in_stored_order(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com", f_name="Olive")
    guest = make_user("guest@example.com")
    placeholder = PlaceholderRegistry(PrincipalStore(db)).get_or_create("invitee@example.com")
    event_id = make_event(
        owner,
        admin_ids=[f"user:{owner}"],
        member_ids=[str(placeholder), f"user:{guest}"],
    )

    event = _resolver(db).resolve(EventStore(db).get(event_id))

    assert [principal.id for principal in event.admins] == [owner]
    assert isinstance(event.admins[0], UserPrincipal)
    assert event.admins[0].f_name == "Olive"
    assert [principal.email for principal in event.members] == ["invitee@example.com", "guest@example.com"]
    assert isinstance(event.members[0], PlaceholderPrincipal)
    assert event.members[0].joined is False


def test_duplicate_ids_are_kept(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com")
    guest = make_user("guest@example.com")
    event_id = make_event(owner, member_ids=[f"user:{guest}", f"user:{owner}", f"user:{guest}"])

    event = _resolver(db).resolve(EventStore(db).get(event_id))

    assert [principal.id for principal in event.members] == [guest, owner, guest]


def test_dangling_and_untagged_ids_are_dropped(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com")
    event_id = make_event(
        owner,
        admin_ids=["user:missing", f"user:{owner}", "placeholder:missing"],
        member_ids=["no-kind-tag", "robot:1"],
    )

    event = _resolver(db).resolve(EventStore(db).get(event_id))

    assert [principal.id for principal in event.admins] == [owner]
    assert event.members == ()


def test_user_id_under_placeholder_tag_does_not_resolve(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com")
    event_id = make_event(owner, member_ids=[f"placeholder:{owner}"])

    event = _resolver(db).resolve(EventStore(db).get(event_id))

    assert event.members == ()


def test_resolution_is_idempotent(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com")
    placeholder = PlaceholderRegistry(PrincipalStore(db)).get_or_create("invitee@example.com")
    event_id = make_event(owner, member_ids=[str(placeholder), "user:gone"])
    raw = EventStore(db).get(event_id)
    resolver = _resolver(db)

    first = resolver.resolve(raw)
    second = resolver.resolve(raw)

    assert first.admins == second.admins
    assert first.members == second.members


def test_promoted_placeholder_resolves_to_user(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com")
    registry = PlaceholderRegistry(PrincipalStore(db))
    placeholder = registry.get_or_create("late@example.com")
    event_id = make_event(owner, member_ids=[str(placeholder)])

    late = make_user("late@example.com", l_name="Comer")
    assert registry.promote("late@example.com") == placeholder
    db.commit()

    event = _resolver(db).resolve(EventStore(db).get(event_id))

    assert event.members[0] == UserPrincipal(id=late, email="late@example.com", l_name="Comer")
    assert event.members[0].principal_id == PrincipalId.user(late)


def test_resolve_many_batches_across_events(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com")
    guest = make_user("guest@example.com")
    first_id = make_event(owner, member_ids=[f"user:{guest}"], name="First")
    second_id = make_event(owner, private=False, name="Second")

    events = _resolver(db).resolve_many(EventStore(db).list_by_creator(owner))

    by_id = {event.id: event for event in events}
    assert [principal.id for principal in by_id[first_id].members] == [guest]
    assert by_id[second_id].members == ()
    assert not by_id[second_id].is_private


def test_entries_pair_stored_ids_with_principals(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com")
    event_id = make_event(owner, admin_ids=[f"user:{owner}", "user:gone"])

    entries = _resolver(db).entries(EventStore(db).get(event_id), "admin")

    assert [(str(item), principal.email) for item, principal in entries] == [(f"user:{owner}", "owner@example.com")]


def test_aggregated_event_dict_never_carries_passwords(db, make_user, make_event) -> None:
    owner = make_user("owner@example.com", password="hunter2")
    event_id = make_event(owner)

    payload = _resolver(db).resolve(EventStore(db).get(event_id)).to_dict()

    admin = payload["admins"][0]
    assert admin["email"] == "owner@example.com"
    assert "password" not in admin
    assert "password_hash" not in admin
    assert payload["is_private"] is True
