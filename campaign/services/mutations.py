from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import Request

from ..errors import NotFound
from ..principals import AggregatedEvent, PrincipalId, RawEvent, normalize_email, parse_role
from . import access, audit
from .membership import MembershipResolver
from .placeholders import PlaceholderRegistry
from .store import EventStore, PrincipalStore

LOGGER = logging.getLogger(__name__)

ListBuilder = Callable[[RawEvent, AggregatedEvent], "list[PrincipalId | str] | None"]


class MembershipService:
    """Applies invite/remove changes to an event's admin or member list.

    Each attempt reads the event, authorizes against its resolved form and
    writes the new list only if the event version is unchanged. A lost race
    re-reads and tries again, so concurrent changes to the same list are
    never overwritten.
    """

    def __init__(
        self,
        events: EventStore,
        principals: PrincipalStore,
        *,
        max_attempts: int = 5,
    ) -> None:
        self._events = events
        self._principals = principals
        self._resolver = MembershipResolver(principals)
        self._placeholders = PlaceholderRegistry(principals)
        self._max_attempts = max(1, max_attempts)

    def principal_for_email(self, email: str) -> PrincipalId:
        user = self._principals.user_by_email(email)
        if user is not None:
            return PrincipalId.user(user.id)
        return self._placeholders.get_or_create(email)

    def add_principal(
        self,
        actor: PrincipalId,
        event_id: str,
        role: str,
        email: str,
        *,
        request: Request | None = None,
    ) -> bool:
        role = parse_role(role)
        email = normalize_email(email)
        target: PrincipalId | None = None

        def build(raw: RawEvent, event: AggregatedEvent) -> list[PrincipalId | str] | None:
            nonlocal target
            access.require_invite(actor, event, role)
            if target is None:
                target = self.principal_for_email(email)
            current = list(raw.ids_for(role))
            resolved = {principal.principal_id for principal in event.principals_for(role)}
            if target in current or target in resolved:
                return None
            return current + [target]

        return self._apply(
            actor,
            event_id,
            role,
            build,
            action=audit.PRINCIPAL_ADDED,
            email=email,
            request=request,
        )

    def remove_principal(
        self,
        actor: PrincipalId,
        event_id: str,
        role: str,
        email: str,
        *,
        request: Request | None = None,
    ) -> bool:
        role = parse_role(role)
        email = normalize_email(email)

        def build(raw: RawEvent, event: AggregatedEvent) -> list[PrincipalId | str] | None:
            access.require_remove(actor, event, role)
            entries = self._resolver.entries(raw, role)
            kept = [item for item, principal in entries if principal.email.lower() != email]
            if len(kept) == len(entries):
                return None
            return kept

        return self._apply(
            actor,
            event_id,
            role,
            build,
            action=audit.PRINCIPAL_REMOVED,
            email=email,
            request=request,
        )

    def _apply(
        self,
        actor: PrincipalId,
        event_id: str,
        role: str,
        build: ListBuilder,
        *,
        action: str,
        email: str,
        request: Request | None,
    ) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            raw = self._events.get(event_id)
            if raw is None:
                raise NotFound("No Event Found")
            event = self._resolver.resolve(raw)

            new_ids = build(raw, event)
            if new_ids is None:
                return True

            if self._events.replace_member_list(event_id, role, new_ids, expected_version=raw.version):
                audit.record_event_change(
                    self._events.db,
                    event_id,
                    action,
                    actor=actor,
                    version=raw.version + 1,
                    role=role,
                    email=email,
                    request=request,
                )
                self._events.commit()
                LOGGER.info("Event %s %s list changed by %s (%s)", event_id, role, actor, action)
                return True

            self._events.rollback()
            LOGGER.info("Event %s changed concurrently; retrying %s (attempt %d)", event_id, action, attempt)

        LOGGER.warning("Gave up on %s for event %s after %d attempts", action, event_id, self._max_attempts)
        return False
