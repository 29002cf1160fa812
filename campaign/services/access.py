from __future__ import annotations

from shared.permissions import (
    ADMIN_ACTIONS,
    EDIT,
    INVITE_MEMBER,
    ROLE_ADMIN,
    ROLE_MEMBER,
    VIEW,
    invite_action,
    remove_action,
)

from ..errors import Forbidden
from ..principals import AggregatedEvent, PrincipalId


def _admin_ids(event: AggregatedEvent) -> set[PrincipalId]:
    # the creator counts as an admin whatever the stored list says
    ids = {principal.principal_id for principal in event.admins}
    ids.add(event.creator)
    return ids


def _member_ids(event: AggregatedEvent) -> set[PrincipalId]:
    return {principal.principal_id for principal in event.members}


def is_admin(actor: PrincipalId | None, event: AggregatedEvent) -> bool:
    return actor is not None and actor in _admin_ids(event)


def is_member(actor: PrincipalId | None, event: AggregatedEvent) -> bool:
    return actor is not None and actor in _member_ids(event)


def can_view(actor: PrincipalId | None, event: AggregatedEvent) -> bool:
    if not event.is_private:
        return True
    return is_admin(actor, event) or is_member(actor, event)


def can_edit(actor: PrincipalId | None, event: AggregatedEvent) -> bool:
    return is_admin(actor, event)


def can_invite(actor: PrincipalId | None, event: AggregatedEvent, role: str) -> bool:
    if actor is None:
        return False
    if role == ROLE_ADMIN:
        return can_edit(actor, event)
    return not event.is_private or can_edit(actor, event) or is_member(actor, event)


def can_remove(actor: PrincipalId | None, event: AggregatedEvent, role: str) -> bool:
    return can_edit(actor, event)


def permitted_actions(actor: PrincipalId | None, event: AggregatedEvent) -> set[str]:
    if can_edit(actor, event):
        return set(ADMIN_ACTIONS)
    actions: set[str] = set()
    if can_view(actor, event):
        actions.add(VIEW)
    if can_invite(actor, event, ROLE_MEMBER):
        actions.add(INVITE_MEMBER)
    return actions


def require_action(actor: PrincipalId | None, event: AggregatedEvent, action: str) -> None:
    if action not in permitted_actions(actor, event):
        if action == VIEW:
            raise Forbidden("Not Allowed. Private Event.")
        raise Forbidden("Not Allowed")


def require_edit(actor: PrincipalId | None, event: AggregatedEvent) -> None:
    require_action(actor, event, EDIT)


def require_invite(actor: PrincipalId | None, event: AggregatedEvent, role: str) -> None:
    require_action(actor, event, invite_action(role))


def require_remove(actor: PrincipalId | None, event: AggregatedEvent, role: str) -> None:
    require_action(actor, event, remove_action(role))
