"""Persistence boundary consumed by the authorization core.

Stores never commit on their own; the calling service decides where the
transaction ends. Any driver error is rolled back and surfaced as
``StoreFailure``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shared.permissions import ROLE_ADMIN

from ..errors import StoreFailure
from ..models import Event, Organization, Placeholder, User
from ..principals import PlaceholderPrincipal, PrincipalId, RawEvent, UserPrincipal

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def to_user_principal(row: User) -> UserPrincipal:
    return UserPrincipal(id=row.id, email=row.email, f_name=row.f_name, l_name=row.l_name, phone=row.phone)


def to_placeholder_principal(row: Placeholder) -> PlaceholderPrincipal:
    return PlaceholderPrincipal(id=row.id, email=row.email, joined=row.joined)


def _parse_ids(values: Iterable[str]) -> tuple[PrincipalId | str, ...]:
    parsed: list[PrincipalId | str] = []
    for value in values or ():
        try:
            parsed.append(PrincipalId.parse(value))
        except ValueError:
            # kept verbatim so the resolver can report and drop it
            parsed.append(str(value))
    return tuple(parsed)


def to_raw_event(row: Event) -> RawEvent:
    return RawEvent(
        id=row.id,
        type=row.type,
        name=row.name,
        visibility=row.visibility,
        created_by_id=row.created_by_id,
        admin_ids=_parse_ids(row.admin_ids),
        member_ids=_parse_ids(row.member_ids),
        version=row.version,
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        organization_id=row.organization_id,
        keywords=tuple(row.keywords or ()),
        pic_urls=tuple(row.pic_urls or ()),
        contacts=tuple(row.contacts or ()),
        goal_amount=row.goal_amount,
        details=dict(row.details or {}),
    )


class _SessionStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            LOGGER.warning("Store operation %s failed: %s", operation, exc)
            raise StoreFailure(f"Store operation failed: {operation}") from exc

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            LOGGER.warning("Store commit failed: %s", exc)
            raise StoreFailure("Store commit failed") from exc

    def rollback(self) -> None:
        self.db.rollback()


class EventStore(_SessionStore):
    def get(self, event_id: str) -> RawEvent | None:
        with self._guard("load_event"):
            row = self.db.execute(
                select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
            ).scalar_one_or_none()
        return to_raw_event(row) if row else None

    def list_by_creator(self, user_id: str) -> list[RawEvent]:
        with self._guard("load_events_by_creator"):
            rows = self.db.execute(
                select(Event)
                .where(Event.created_by_id == user_id)
                .order_by(Event.created_at.asc())
                .execution_options(populate_existing=True)
            ).scalars().all()
        return [to_raw_event(row) for row in rows]

    def create(self, *, created_by_id: str, admin_ids: Sequence[PrincipalId], **fields: Any) -> str:
        with self._guard("create_event"):
            row = Event(
                created_by_id=created_by_id,
                admin_ids=[str(item) for item in admin_ids],
                member_ids=[],
                version=1,
                **fields,
            )
            self.db.add(row)
            self.db.flush()
        return row.id

    def update_fields(self, event_id: str, changes: dict[str, Any]) -> bool:
        if not changes:
            return True
        values = dict(changes)
        values["version"] = Event.version + 1
        values["updated_at"] = _utcnow()
        with self._guard("update_event"):
            result = self.db.execute(
                update(Event).where(Event.id == event_id).values(**values).execution_options(synchronize_session=False)
            )
        return result.rowcount == 1

    def replace_member_list(
        self,
        event_id: str,
        role: str,
        ids: Sequence[PrincipalId | str],
        *,
        expected_version: int,
    ) -> bool:
        """Conditionally overwrite one membership list.

        Succeeds only while the stored version still equals ``expected_version``;
        a concurrent writer bumps the version first and makes this return False.
        """
        column = "admin_ids" if role == ROLE_ADMIN else "member_ids"
        with self._guard("replace_member_list"):
            result = self.db.execute(
                update(Event)
                .where(Event.id == event_id, Event.version == expected_version)
                .values(
                    {
                        column: [str(item) for item in ids],
                        "version": expected_version + 1,
                        "updated_at": _utcnow(),
                    }
                )
                .execution_options(synchronize_session=False)
            )
        return result.rowcount == 1


class PrincipalStore(_SessionStore):
    def users_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        with self._guard("load_users"):
            rows = self.db.execute(select(User).where(User.id.in_(ids))).scalars().all()
        return {row.id: row for row in rows}

    def placeholders_by_ids(self, placeholder_ids: Iterable[str]) -> dict[str, Placeholder]:
        ids = sorted(set(placeholder_ids))
        if not ids:
            return {}
        with self._guard("load_placeholders"):
            rows = self.db.execute(
                select(Placeholder).where(Placeholder.id.in_(ids)).execution_options(populate_existing=True)
            ).scalars().all()
        return {row.id: row for row in rows}

    def user_by_id(self, user_id: str) -> User | None:
        with self._guard("load_user"):
            return self.db.get(User, user_id)

    def user_by_email(self, email: str) -> User | None:
        with self._guard("load_user_by_email"):
            return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def placeholder_by_email(self, email: str) -> Placeholder | None:
        with self._guard("load_placeholder_by_email"):
            return self.db.execute(
                select(Placeholder).where(Placeholder.email == email).execution_options(populate_existing=True)
            ).scalar_one_or_none()

    def create_user(self, *, email: str, password_hash: str, f_name: str = "", l_name: str = "", phone: str = "") -> User:
        with self._guard("create_user"):
            row = User(email=email, password_hash=password_hash, f_name=f_name, l_name=l_name, phone=phone)
            self.db.add(row)
            self.db.flush()
        return row

    def create_placeholder(self, email: str) -> Placeholder:
        with self._guard("create_placeholder"):
            row = Placeholder(email=email, joined=False)
            self.db.add(row)
            self.db.flush()
        return row


class OrganizationStore(_SessionStore):
    def get(self, organization_id: str) -> Organization | None:
        with self._guard("load_organization"):
            return self.db.get(Organization, organization_id)

    def list_by_creator(self, user_id: str) -> list[Organization]:
        with self._guard("load_organizations_by_creator"):
            return list(
                self.db.execute(
                    select(Organization).where(Organization.created_by_id == user_id).order_by(Organization.created_at.asc())
                ).scalars().all()
            )

    def create(self, *, created_by_id: str, **fields: Any) -> Organization:
        with self._guard("create_organization"):
            row = Organization(created_by_id=created_by_id, **fields)
            self.db.add(row)
            self.db.flush()
        return row


def organization_to_dict(row: Organization) -> dict[str, Any]:
    return {
        "id": row.id,
        "created_by_id": row.created_by_id,
        "name": row.name,
        "description": row.description,
        "address": row.address,
        "phone": row.phone,
        "website": row.website,
        "logo_url": row.logo_url,
        "bank": {
            "name": row.bank_name,
            "account": row.bank_account,
            "routing": row.bank_routing,
        },
    }
