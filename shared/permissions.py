from __future__ import annotations

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"
ROLES = {ROLE_ADMIN, ROLE_MEMBER}

VIEW = "view"
EDIT = "edit"
INVITE_MEMBER = "invite_member"
INVITE_ADMIN = "invite_admin"
REMOVE_MEMBER = "remove_member"
REMOVE_ADMIN = "remove_admin"

ACTIONS = {VIEW, EDIT, INVITE_MEMBER, INVITE_ADMIN, REMOVE_MEMBER, REMOVE_ADMIN}

ADMIN_ACTIONS = set(ACTIONS)


def invite_action(role: str) -> str:
    return INVITE_ADMIN if role == ROLE_ADMIN else INVITE_MEMBER


def remove_action(role: str) -> str:
    return REMOVE_ADMIN if role == ROLE_ADMIN else REMOVE_MEMBER
