from __future__ import annotations

from typing import Any, Iterable

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import AuditEvent
from ..principals import PrincipalId

EVENT_CREATED = "event_created"
EVENT_UPDATED = "event_updated"
PRINCIPAL_ADDED = "principal_added"
PRINCIPAL_REMOVED = "principal_removed"


def record_event_change(
    db: Session,
    event_id: str,
    action: str,
    *,
    actor: PrincipalId,
    version: int | None,
    role: str | None = None,
    email: str | None = None,
    fields: Iterable[str] = (),
    request: Request | None = None,
) -> AuditEvent:
    """Stage an audit row for a change to one event.

    The row joins the caller's transaction; it is written by the same commit
    as the change it describes.
    """
    row = AuditEvent(
        event_id=event_id,
        action=action,
        actor_user_id=actor.raw,
        role=role,
        target_email=email,
        event_version=version,
        changed_fields=sorted(fields),
    )
    if request is not None:
        row.ip = request.client.host if request.client else None
        row.user_agent = request.headers.get("user-agent")
    db.add(row)
    return row


def event_history(db: Session, event_id: str) -> list[AuditEvent]:
    return list(
        db.execute(
            select(AuditEvent).where(AuditEvent.event_id == event_id).order_by(AuditEvent.event_version, AuditEvent.at)
        ).scalars()
    )


def audit_to_dict(row: AuditEvent) -> dict[str, Any]:
    return {
        "event_id": row.event_id,
        "action": row.action,
        "actor_user_id": row.actor_user_id,
        "role": row.role,
        "email": row.target_email,
        "version": row.event_version,
        "fields": list(row.changed_fields or ()),
        "at": row.at.isoformat() if row.at else None,
    }
