"""Value types the authorization core works with.

Membership lists hold ``PrincipalId`` values, serialized as ``"<kind>:<raw>"``
strings in storage. Resolution turns them into ``UserPrincipal`` or
``PlaceholderPrincipal`` records; both are addressed uniformly by their
``principal_id``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from shared.permissions import ROLE_ADMIN, ROLE_MEMBER

from .errors import ValidationError

KIND_USER = "user"
KIND_PLACEHOLDER = "placeholder"
PRINCIPAL_KINDS = (KIND_USER, KIND_PLACEHOLDER)

VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"


@dataclass(frozen=True, order=True)
class PrincipalId:
    kind: str
    raw: str

    def __post_init__(self) -> None:
        if self.kind not in PRINCIPAL_KINDS:
            raise ValueError(f"Unknown principal kind: {self.kind!r}")
        if not self.raw:
            raise ValueError("Principal id must not be empty")

    @classmethod
    def user(cls, raw: str) -> PrincipalId:
        return cls(KIND_USER, raw)

    @classmethod
    def placeholder(cls, raw: str) -> PrincipalId:
        return cls(KIND_PLACEHOLDER, raw)

    @classmethod
    def parse(cls, value: str) -> PrincipalId:
        kind, sep, raw = str(value).partition(":")
        if not sep:
            raise ValueError(f"Principal id is missing a kind tag: {value!r}")
        return cls(kind, raw)

    def __str__(self) -> str:
        return f"{self.kind}:{self.raw}"


@dataclass(frozen=True)
class UserPrincipal:
    id: str
    email: str
    f_name: str = ""
    l_name: str = ""
    phone: str = ""

    @property
    def principal_id(self) -> PrincipalId:
        return PrincipalId.user(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": KIND_USER,
            "id": self.id,
            "email": self.email,
            "fName": self.f_name,
            "lName": self.l_name,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class PlaceholderPrincipal:
    id: str
    email: str
    joined: bool = False

    @property
    def principal_id(self) -> PrincipalId:
        return PrincipalId.placeholder(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": KIND_PLACEHOLDER,
            "id": self.id,
            "email": self.email,
            "joined": self.joined,
        }


Principal = Union[UserPrincipal, PlaceholderPrincipal]


def parse_role(value: Any) -> str:
    role = str(value or "").strip().lower()
    if role not in (ROLE_ADMIN, ROLE_MEMBER):
        raise ValidationError("Invalid Type")
    return role


def normalize_email(value: str) -> str:
    email = str(value or "").strip().lower()
    if "@" not in email:
        raise ValidationError("Invalid email")
    return email


def normalize_is_private(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValidationError("is_private must be a boolean or 'true'/'false'")


@dataclass(frozen=True)
class RawEvent:
    id: str
    type: str
    name: str
    visibility: str
    created_by_id: str
    admin_ids: tuple[PrincipalId | str, ...] = ()
    member_ids: tuple[PrincipalId | str, ...] = ()
    version: int = 1
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    organization_id: str | None = None
    keywords: tuple[str, ...] = ()
    pic_urls: tuple[str, ...] = ()
    contacts: tuple[dict[str, Any], ...] = ()
    goal_amount: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def creator(self) -> PrincipalId:
        return PrincipalId.user(self.created_by_id)

    def ids_for(self, role: str) -> tuple[PrincipalId | str, ...]:
        return self.admin_ids if role == ROLE_ADMIN else self.member_ids


@dataclass(frozen=True)
class AggregatedEvent:
    id: str
    type: str
    name: str
    visibility: str
    created_by_id: str
    admins: tuple[Principal, ...] = ()
    members: tuple[Principal, ...] = ()
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    organization_id: str | None = None
    keywords: tuple[str, ...] = ()
    pic_urls: tuple[str, ...] = ()
    contacts: tuple[dict[str, Any], ...] = ()
    goal_amount: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_private(self) -> bool:
        return self.visibility == VISIBILITY_PRIVATE

    @property
    def creator(self) -> PrincipalId:
        return PrincipalId.user(self.created_by_id)

    def principals_for(self, role: str) -> tuple[Principal, ...]:
        return self.admins if role == ROLE_ADMIN else self.members

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_private": self.is_private,
            "visibility": self.visibility,
            "created_by_id": self.created_by_id,
            "organization_id": self.organization_id,
            "keywords": list(self.keywords),
            "pic_urls": list(self.pic_urls),
            "contacts": [dict(contact) for contact in self.contacts],
            "goal_amount": self.goal_amount,
            "admins": [principal.to_dict() for principal in self.admins],
            "members": [principal.to_dict() for principal in self.members],
        }
        for key, value in self.details.items():
            payload.setdefault(key, value)
        return payload
