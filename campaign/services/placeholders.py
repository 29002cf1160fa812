from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from ..errors import StoreFailure
from ..principals import PrincipalId, normalize_email
from .store import PrincipalStore

LOGGER = logging.getLogger(__name__)


class PlaceholderRegistry:
    """Stand-in principals for invited emails that have no account yet.

    One placeholder exists per email. ``get_or_create`` commits its own insert
    so a concurrent caller either sees the row or trips the unique index and
    re-reads it.
    """

    def __init__(self, principals: PrincipalStore) -> None:
        self._principals = principals

    def get_or_create(self, email: str) -> PrincipalId:
        normalized = normalize_email(email)
        existing = self._principals.placeholder_by_email(normalized)
        if existing is not None:
            return PrincipalId.placeholder(existing.id)

        try:
            row = self._principals.create_placeholder(normalized)
            self._principals.commit()
        except IntegrityError:
            self._principals.rollback()
            existing = self._principals.placeholder_by_email(normalized)
            if existing is None:
                raise StoreFailure("Placeholder insert conflicted but no row was found") from None
            return PrincipalId.placeholder(existing.id)

        LOGGER.info("Created placeholder %s for invited email", row.id)
        return PrincipalId.placeholder(row.id)

    def promote(self, email: str) -> PrincipalId | None:
        """Point the placeholder for ``email`` at the account registered with it.

        Membership lists keep the placeholder id; resolution follows the link
        to the user record. Returns the placeholder id, or None when the email
        was never invited or has no account yet. The caller commits.
        """
        normalized = normalize_email(email)
        row = self._principals.placeholder_by_email(normalized)
        if row is None:
            return None
        user = self._principals.user_by_email(normalized)
        if user is None:
            return None
        row.joined = True
        row.user_id = user.id
        LOGGER.info("Promoted placeholder %s to user %s", row.id, user.id)
        return PrincipalId.placeholder(row.id)
