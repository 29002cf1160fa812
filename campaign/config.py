from __future__ import annotations

import os
from dataclasses import dataclass

from shared.runtime import env_int


def _allow_insecure_defaults() -> bool:
    return os.environ.get("ALLOW_INSECURE_DEFAULTS", "").strip() == "1"


def _secure_value(name: str, default: str, *, blocked: set[str]) -> str:
    value = os.environ.get(name, default).strip()
    if not value:
        raise RuntimeError(f"{name} must not be empty")
    if not _allow_insecure_defaults() and value in blocked:
        raise RuntimeError(f"{name} uses an insecure placeholder value; set a secure value")
    return value


@dataclass(frozen=True)
class CampaignConfig:
    database_url: str
    secret_key: str
    membership_write_attempts: int
    invite_webhook_url: str | None
    invite_from_email: str
    invite_timeout_seconds: int


def load_config() -> CampaignConfig:
    webhook = os.environ.get("CAMPAIGN_INVITE_WEBHOOK_URL", "").strip()
    return CampaignConfig(
        database_url=os.environ.get("CAMPAIGN_DATABASE_URL", "sqlite:///./campaign.db"),
        secret_key=_secure_value(
            "CAMPAIGN_SECRET_KEY",
            "jwt_super_secret_password",
            blocked={"jwt_super_secret_password", "replace-with-secure-key", "changeme"},
        ),
        membership_write_attempts=env_int("CAMPAIGN_MEMBERSHIP_WRITE_ATTEMPTS", 5, minimum=1, maximum=50),
        invite_webhook_url=webhook or None,
        invite_from_email=os.environ.get("CAMPAIGN_INVITE_FROM_EMAIL", "events@localhost").strip(),
        invite_timeout_seconds=env_int("CAMPAIGN_INVITE_TIMEOUT_SECONDS", 8, minimum=1, maximum=60),
    )
