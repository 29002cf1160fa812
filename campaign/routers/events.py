from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from shared.permissions import ROLE_MEMBER
from shared.schemas import (
    EventUpdateRequest,
    InviteRequest,
    InviteResponse,
    MembershipRequest,
    MembershipResponse,
    NewEventRequest,
    NewEventResponse,
)

from ..dependencies import get_event_service, get_invite_notifier, get_membership_service
from ..principals import normalize_email
from ..services import access
from ..services.auth import AuthContext, optional_auth_context, require_auth_context, require_unscoped_auth_context
from ..services.events import EventService
from ..services.mutations import MembershipService
from ..services.notifications import InviteNotifier

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post("", response_model=NewEventResponse)
def create_event(
    body: NewEventRequest,
    request: Request,
    auth: AuthContext = Depends(require_unscoped_auth_context),
    events: EventService = Depends(get_event_service),
) -> NewEventResponse:
    event_id = events.create(auth.user_id, body, request=request)
    return NewEventResponse(success=True, event_id=event_id)


@router.get("/{event_id}")
def get_event(
    event_id: str,
    auth: AuthContext | None = Depends(optional_auth_context),
    events: EventService = Depends(get_event_service),
) -> dict:
    if auth is not None:
        auth.ensure_scope(event_id)
    event = events.view(auth.actor if auth else None, event_id)
    return event.to_dict()


@router.get("/{event_id}/history")
def event_history(
    event_id: str,
    auth: AuthContext = Depends(require_auth_context),
    events: EventService = Depends(get_event_service),
) -> list[dict]:
    auth.ensure_scope(event_id)
    return events.history(auth.actor, event_id)


@router.post("/{event_id}")
def update_event(
    event_id: str,
    body: EventUpdateRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth_context),
    events: EventService = Depends(get_event_service),
) -> dict:
    auth.ensure_scope(event_id)
    return {"success": events.update(auth.actor, event_id, body, request=request)}


@router.post("/user/{event_id}", response_model=MembershipResponse)
def add_user(
    event_id: str,
    body: MembershipRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth_context),
    membership: MembershipService = Depends(get_membership_service),
) -> MembershipResponse:
    auth.ensure_scope(event_id)
    success = membership.add_principal(auth.actor, event_id, body.type, body.email, request=request)
    return MembershipResponse(success=success, ids=[event_id])


@router.delete("/user/{event_id}", response_model=MembershipResponse)
def remove_user(
    event_id: str,
    body: MembershipRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth_context),
    membership: MembershipService = Depends(get_membership_service),
) -> MembershipResponse:
    auth.ensure_scope(event_id)
    success = membership.remove_principal(auth.actor, event_id, body.type, body.email, request=request)
    return MembershipResponse(success=success, ids=[event_id])


@router.post("/invite/{event_id}", response_model=InviteResponse)
def send_invite(
    event_id: str,
    body: InviteRequest,
    auth: AuthContext = Depends(require_auth_context),
    events: EventService = Depends(get_event_service),
    notifier: InviteNotifier = Depends(get_invite_notifier),
) -> InviteResponse:
    auth.ensure_scope(event_id)
    event = events.load(event_id)
    access.require_invite(auth.actor, event, ROLE_MEMBER)
    sent = notifier.send_invite(
        event_id=event.id,
        event_name=event.name,
        email=normalize_email(body.email),
        message=body.message,
    )
    return InviteResponse(sent=sent)
