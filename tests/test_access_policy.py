from __future__ import annotations

import itertools

import pytest

from campaign.errors import Forbidden
from campaign.principals import AggregatedEvent, PlaceholderPrincipal, PrincipalId, UserPrincipal
from campaign.services import access
from shared.permissions import ACTIONS, EDIT, INVITE_ADMIN, INVITE_MEMBER, REMOVE_MEMBER, VIEW

OWNER = UserPrincipal(id="owner", email="owner@example.com")
ADMIN = UserPrincipal(id="admin", email="admin@example.com")
MEMBER = UserPrincipal(id="member", email="member@example.com")
INVITEE = PlaceholderPrincipal(id="member", email="invitee@example.com")


def _event(*, private: bool = True, admins=(OWNER,), members=()) -> AggregatedEvent:
    return AggregatedEvent(
        id="event-1",
        type="Fundraiser",
        name="Gala",
        visibility="private" if private else "public",
        created_by_id=OWNER.id,
        admins=tuple(admins),
        members=tuple(members),
    )


def _user(raw: str) -> PrincipalId:
    return PrincipalId.user(raw)


def test_private_event_denies_outsiders_and_public_allows_them() -> None:
    private = _event(private=True)
    public = _event(private=False)

    assert not access.can_view(_user("stranger"), private)
    assert access.can_view(_user("stranger"), public)
    assert access.can_view(None, public)
    assert not access.can_view(None, private)


def test_members_and_admins_can_view_private_event() -> None:
    event = _event(admins=(OWNER, ADMIN), members=(MEMBER,))

    assert access.can_view(_user("admin"), event)
    assert access.can_view(_user("member"), event)


def test_creator_keeps_admin_rights_when_dropped_from_admin_list() -> None:
    event = _event(admins=(ADMIN,))

    assert access.can_edit(_user("owner"), event)
    assert access.can_view(_user("owner"), event)
    assert access.can_invite(_user("owner"), event, "admin")
    assert access.can_remove(_user("owner"), event, "admin")


def test_member_cannot_edit_or_remove() -> None:
    event = _event(members=(MEMBER,))

    assert not access.can_edit(_user("member"), event)
    assert not access.can_remove(_user("member"), event, "member")
    assert not access.can_remove(_user("member"), event, "admin")
    assert not access.can_invite(_user("member"), event, "admin")


def test_member_invites_follow_visibility() -> None:
    private = _event(members=(MEMBER,))
    public = _event(private=False)

    assert access.can_invite(_user("member"), private, "member")
    assert not access.can_invite(_user("stranger"), private, "member")
    assert access.can_invite(_user("stranger"), public, "member")
    assert not access.can_invite(_user("stranger"), public, "admin")
    assert not access.can_invite(None, public, "member")


def test_placeholder_ids_never_match_a_user_actor() -> None:
    event = _event(members=(INVITEE,))

    assert not access.is_member(_user("member"), event)
    assert not access.can_view(_user("member"), event)


def test_permitted_actions_by_role() -> None:
    event = _event(admins=(OWNER, ADMIN), members=(MEMBER,))

    assert access.permitted_actions(_user("admin"), event) == ACTIONS
    assert access.permitted_actions(_user("member"), event) == {VIEW, INVITE_MEMBER}
    assert access.permitted_actions(_user("stranger"), event) == set()


def test_require_action_raises_forbidden() -> None:
    event = _event()

    access.require_action(_user("owner"), event, REMOVE_MEMBER)
    with pytest.raises(Forbidden):
        access.require_action(_user("stranger"), event, VIEW)
    with pytest.raises(Forbidden):
        access.require_edit(_user("stranger"), event)
    with pytest.raises(Forbidden):
        access.require_invite(_user("stranger"), event, "admin")


def test_admin_implies_edit_and_edit_implies_view() -> None:
    principals = (OWNER, ADMIN, MEMBER, INVITEE)
    actors = [None] + [_user(raw) for raw in ("owner", "admin", "member", "stranger")]
    for private, admin_count, member_count in itertools.product((True, False), range(3), range(3)):
        event = _event(
            private=private,
            admins=principals[1 : 1 + admin_count],
            members=principals[2 : 2 + member_count],
        )
        for admin in [event.creator] + [principal.principal_id for principal in event.admins]:
            assert access.can_edit(admin, event)
            assert EDIT in access.permitted_actions(admin, event)
        for actor in actors:
            if access.can_edit(actor, event):
                assert access.can_view(actor, event)
            if INVITE_ADMIN in access.permitted_actions(actor, event):
                assert access.can_edit(actor, event)
