from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .db import get_db
from .services.auth import AccountService
from .services.events import EventService
from .services.mutations import MembershipService
from .services.notifications import InviteNotifier
from .services.store import EventStore, OrganizationStore, PrincipalStore


def get_account_service(request: Request, db: Session = Depends(get_db)) -> AccountService:
    return AccountService(PrincipalStore(db), EventStore(db), OrganizationStore(db), request.app.state.claims)


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    return EventService(EventStore(db), PrincipalStore(db), OrganizationStore(db))


def get_membership_service(request: Request, db: Session = Depends(get_db)) -> MembershipService:
    config = request.app.state.config
    return MembershipService(EventStore(db), PrincipalStore(db), max_attempts=config.membership_write_attempts)


def get_invite_notifier(request: Request) -> InviteNotifier:
    return request.app.state.notifier
