"""Shared primitives for the campaign events service."""

from .permissions import ACTIONS, ROLE_ADMIN, ROLE_MEMBER, ROLES
from .security import Claim, ClaimService, InvalidSignature, MalformedToken, TokenError

__all__ = [
    "ACTIONS",
    "ROLES",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "Claim",
    "ClaimService",
    "InvalidSignature",
    "MalformedToken",
    "TokenError",
]
