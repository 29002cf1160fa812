from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from fastapi import Request

from shared.schemas import EventInput, EventUpdateRequest, NewEventRequest

from ..errors import NotFound, ValidationError
from ..principals import (
    VISIBILITY_PRIVATE,
    VISIBILITY_PUBLIC,
    AggregatedEvent,
    PrincipalId,
    normalize_is_private,
)
from . import access, audit
from .membership import MembershipResolver
from .store import EventStore, OrganizationStore, PrincipalStore

LOGGER = logging.getLogger(__name__)


class EventType(str, Enum):
    FUNDRAISER = "Fundraiser"
    TICKETED = "Ticketed"


TYPE_FIELDS: dict[EventType, frozenset[str]] = {
    EventType.TICKETED: frozenset({"address", "website", "sponsor_levels", "additional_donations", "is_limit"}),
    EventType.FUNDRAISER: frozenset({"is_prize", "prizes"}),
}

PROTECTED_FIELDS = frozenset(
    {"id", "type", "created_by_id", "organization_id", "admin_ids", "member_ids", "admins", "members", "version", "visibility"}
)


def _parse_type(value: str) -> EventType:
    try:
        return EventType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown event type: {value!r}") from exc


def _visibility(is_private: Any) -> str:
    return VISIBILITY_PRIVATE if normalize_is_private(is_private) else VISIBILITY_PUBLIC


def _type_details(event_type: EventType, extras: dict[str, Any] | None) -> dict[str, Any]:
    allowed = TYPE_FIELDS[event_type]
    return {key: value for key, value in (extras or {}).items() if key in allowed}


class EventService:
    def __init__(self, events: EventStore, principals: PrincipalStore, organizations: OrganizationStore) -> None:
        self._events = events
        self._organizations = organizations
        self._resolver = MembershipResolver(principals)

    def load(self, event_id: str) -> AggregatedEvent:
        raw = self._events.get(event_id)
        if raw is None:
            raise NotFound("No Event Found")
        return self._resolver.resolve(raw)

    def view(self, actor: PrincipalId | None, event_id: str) -> AggregatedEvent:
        event = self.load(event_id)
        access.require_action(actor, event, access.VIEW)
        return event

    def create(self, user_id: str, body: NewEventRequest, *, request: Request | None = None) -> str:
        event_input: EventInput = body.event
        event_type = _parse_type(event_input.type)
        visibility = _visibility(event_input.is_private)
        organization_id = self._organization_for(user_id, body)

        event_id = self._events.create(
            created_by_id=user_id,
            admin_ids=[PrincipalId.user(user_id)],
            type=event_type.value,
            name=event_input.name,
            description=event_input.description,
            start_date=event_input.start_date,
            end_date=event_input.end_date,
            visibility=visibility,
            organization_id=organization_id,
            keywords=list(event_input.keywords),
            pic_urls=list(event_input.pic_urls),
            contacts=[contact.model_dump() for contact in event_input.contacts],
            goal_amount=event_input.goal_amount,
            details=_type_details(event_type, event_input.model_extra),
        )
        audit.record_event_change(
            self._events.db,
            event_id,
            audit.EVENT_CREATED,
            actor=PrincipalId.user(user_id),
            version=1,
            request=request,
        )
        self._events.commit()
        LOGGER.info("User %s created %s event %s", user_id, event_type.value, event_id)
        return event_id

    def _organization_for(self, user_id: str, body: NewEventRequest) -> str | None:
        if body.organization_id and body.organization_id != "new":
            if self._organizations.get(body.organization_id) is None:
                raise NotFound("Organization not found")
            return body.organization_id
        if body.organization is not None:
            org = body.organization
            row = self._organizations.create(
                created_by_id=user_id,
                name=org.name,
                description=org.description,
                address=org.address,
                phone=org.phone,
                website=org.website,
                logo_url=org.logo_url,
                bank_name=org.bank.name,
                bank_account=org.bank.account,
                bank_routing=org.bank.routing,
            )
            return row.id
        return None

    def update(self, actor: PrincipalId, event_id: str, body: EventUpdateRequest, *, request: Request | None = None) -> bool:
        changes = body.changes()
        extras = dict(body.model_extra or {})
        blocked = sorted(PROTECTED_FIELDS.intersection(extras))
        if blocked:
            raise ValidationError(f"Fields cannot be updated here: {', '.join(blocked)}")

        event = self.load(event_id)
        access.require_edit(actor, event)

        values: dict[str, Any] = {key: value for key, value in changes.items() if key not in extras}
        cleared = sorted(key for key, value in values.items() if value is None)
        if cleared:
            raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")
        if "is_private" in values:
            values["visibility"] = _visibility(values.pop("is_private"))
        unknown = sorted(key for key in extras if key not in TYPE_FIELDS[_parse_type(event.type)])
        if unknown:
            raise ValidationError(f"Unknown fields for {event.type} event: {', '.join(unknown)}")
        if extras:
            values["details"] = {**event.details, **extras}

        updated = self._events.update_fields(event_id, values)
        if updated and values:
            audit.record_event_change(
                self._events.db,
                event_id,
                audit.EVENT_UPDATED,
                actor=actor,
                version=self._events.get(event_id).version,
                fields=values,
                request=request,
            )
        self._events.commit()
        return updated

    def history(self, actor: PrincipalId, event_id: str) -> list[dict[str, Any]]:
        event = self.load(event_id)
        access.require_edit(actor, event)
        return [audit.audit_to_dict(row) for row in audit.event_history(self._events.db, event_id)]
