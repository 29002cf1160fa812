"""Expands an event's raw admin/member id lists into principal records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..principals import (
    KIND_PLACEHOLDER,
    KIND_USER,
    AggregatedEvent,
    Principal,
    PrincipalId,
    RawEvent,
)
from .store import PrincipalStore, to_placeholder_principal, to_user_principal

LOGGER = logging.getLogger(__name__)


class MembershipResolver:
    """Resolves ``RawEvent`` membership lists against the principal store.

    Output lists keep the order and multiplicity of the stored ids. Ids that
    match neither a user nor a placeholder are dropped from the output rather
    than failing the resolution. A placeholder that has been promoted to a
    registered account resolves to that account's user record.
    """

    def __init__(self, principals: PrincipalStore) -> None:
        self._principals = principals

    def resolve(self, event: RawEvent) -> AggregatedEvent:
        return self.resolve_many([event])[0]

    def resolve_many(self, events: Sequence[RawEvent]) -> list[AggregatedEvent]:
        wanted: set[PrincipalId] = set()
        for event in events:
            wanted.update(item for item in event.admin_ids if isinstance(item, PrincipalId))
            wanted.update(item for item in event.member_ids if isinstance(item, PrincipalId))

        principal_map = self._fetch(wanted)
        return [self._aggregate(event, principal_map) for event in events]

    def entries(self, event: RawEvent, role: str) -> list[tuple[PrincipalId, Principal]]:
        """Stored id and resolved principal for each resolvable entry of one list."""
        ids = event.ids_for(role)
        principal_map = self._fetch(item for item in ids if isinstance(item, PrincipalId))
        return [
            (item, principal_map[item])
            for item in ids
            if isinstance(item, PrincipalId) and item in principal_map
        ]

    def _fetch(self, ids: Iterable[PrincipalId]) -> dict[PrincipalId, Principal]:
        ids = set(ids)
        user_ids = {item.raw for item in ids if item.kind == KIND_USER}
        placeholder_ids = {item.raw for item in ids if item.kind == KIND_PLACEHOLDER}

        placeholders = self._principals.placeholders_by_ids(placeholder_ids)
        promoted_user_ids = {row.user_id for row in placeholders.values() if row.user_id}
        users = self._principals.users_by_ids(user_ids | promoted_user_ids)

        principal_map: dict[PrincipalId, Principal] = {}
        for user_id in user_ids:
            row = users.get(user_id)
            if row is not None:
                principal_map[PrincipalId.user(user_id)] = to_user_principal(row)
        for placeholder_id, row in placeholders.items():
            promoted = users.get(row.user_id) if row.user_id else None
            if promoted is not None:
                principal_map[PrincipalId.placeholder(placeholder_id)] = to_user_principal(promoted)
            else:
                principal_map[PrincipalId.placeholder(placeholder_id)] = to_placeholder_principal(row)
        return principal_map

    def _map_ids(
        self,
        event_id: str,
        ids: Sequence[PrincipalId | str],
        principal_map: dict[PrincipalId, Principal],
    ) -> tuple[Principal, ...]:
        resolved: list[Principal] = []
        for item in ids:
            principal = principal_map.get(item) if isinstance(item, PrincipalId) else None
            if principal is None:
                LOGGER.debug("Dropping dangling principal %s from event %s", item, event_id)
                continue
            resolved.append(principal)
        return tuple(resolved)

    def _aggregate(self, event: RawEvent, principal_map: dict[PrincipalId, Principal]) -> AggregatedEvent:
        return AggregatedEvent(
            id=event.id,
            type=event.type,
            name=event.name,
            visibility=event.visibility,
            created_by_id=event.created_by_id,
            admins=self._map_ids(event.id, event.admin_ids, principal_map),
            members=self._map_ids(event.id, event.member_ids, principal_map),
            description=event.description,
            start_date=event.start_date,
            end_date=event.end_date,
            organization_id=event.organization_id,
            keywords=event.keywords,
            pic_urls=event.pic_urls,
            contacts=event.contacts,
            goal_amount=event.goal_amount,
            details=dict(event.details),
        )
