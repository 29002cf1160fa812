from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from fastapi import Request
from sqlalchemy.exc import IntegrityError

from shared.schemas import JoinRequest
from shared.security import Claim, ClaimService, TokenError

from ..errors import Forbidden, Unauthorized
from ..principals import PrincipalId, normalize_email
from .membership import MembershipResolver
from .placeholders import PlaceholderRegistry
from .store import EventStore, OrganizationStore, PrincipalStore, organization_to_dict, to_user_principal

LOGGER = logging.getLogger(__name__)

_password_hasher = PasswordHasher()


@dataclass(frozen=True)
class AuthContext:
    claim: Claim

    @property
    def user_id(self) -> str:
        return self.claim.user_id

    @property
    def event_id(self) -> str | None:
        return self.claim.event_id

    @property
    def actor(self) -> PrincipalId:
        return PrincipalId.user(self.user_id)

    def ensure_scope(self, event_id: str) -> None:
        if not self.claim.allows_event(event_id):
            raise Forbidden("Token is scoped to a different event")


def hash_secret(secret: str) -> str:
    return _password_hasher.hash(secret)


def verify_secret(secret_hash: str, candidate: str) -> bool:
    try:
        return _password_hasher.verify(secret_hash, candidate)
    except (VerifyMismatchError, InvalidHashError):
        return False


def _extract_token(request: Request) -> str:
    auth_header = request.headers.get("authorization", "")
    parts = auth_header.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
        return parts[1].strip()
    return request.headers.get("token", "").strip()


def _claims(request: Request) -> ClaimService:
    return request.app.state.claims


def _verify(request: Request, token: str) -> AuthContext:
    try:
        claim = _claims(request).verify(token)
    except TokenError as exc:
        raise Unauthorized(str(exc)) from exc
    return AuthContext(claim)


def require_auth_context(request: Request) -> AuthContext:
    token = _extract_token(request)
    if not token:
        raise Unauthorized("Not Authorized")
    return _verify(request, token)


def require_unscoped_auth_context(request: Request) -> AuthContext:
    """Account-wide routes refuse tokens bound to a single event."""
    auth = require_auth_context(request)
    if auth.claim.is_scoped:
        raise Forbidden("Token is scoped to a single event")
    return auth


def optional_auth_context(request: Request) -> AuthContext | None:
    token = _extract_token(request)
    if not token:
        return None
    return _verify(request, token)


class AccountService:
    def __init__(self, principals: PrincipalStore, events: EventStore, organizations: OrganizationStore, claims: ClaimService) -> None:
        self._principals = principals
        self._events = events
        self._organizations = organizations
        self._claims = claims

    def join(self, body: JoinRequest) -> tuple[bool, str]:
        email = normalize_email(body.email)
        if self._principals.user_by_email(email) is not None:
            return False, "User already exists."
        try:
            user = self._principals.create_user(
                email=email,
                password_hash=hash_secret(body.password),
                f_name=body.fName,
                l_name=body.lName,
                phone=body.phone,
            )
            PlaceholderRegistry(self._principals).promote(email)
            self._principals.commit()
        except IntegrityError:
            self._principals.rollback()
            return False, "User already exists."
        LOGGER.info("Registered user %s", user.id)
        return True, "Please login. User was successfully created."

    def login(self, email: str, password: str) -> dict[str, Any]:
        user = self._principals.user_by_email(normalize_email(email))
        if user is None or not verify_secret(user.password_hash, password):
            raise Unauthorized("Unauthorized")
        result = self.overview(user.id)
        result["user"] = to_user_principal(user).to_dict()
        result["token"] = self._claims.issue(Claim(user_id=user.id))
        return result

    def overview(self, user_id: str) -> dict[str, Any]:
        resolver = MembershipResolver(self._principals)
        events = resolver.resolve_many(self._events.list_by_creator(user_id))
        organizations = self._organizations.list_by_creator(user_id)
        return {
            "events": [event.to_dict() for event in events],
            "organizations": [organization_to_dict(row) for row in organizations],
        }
