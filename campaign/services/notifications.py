from __future__ import annotations

import logging

import httpx

from ..config import CampaignConfig

LOGGER = logging.getLogger(__name__)


class InviteNotifier:
    """Hands invite emails to an external delivery webhook.

    Without a webhook configured the invite is only logged. Delivery problems
    are logged and reported as False; they never touch event membership.
    """

    def __init__(self, config: CampaignConfig, *, client: httpx.Client | None = None) -> None:
        self._url = config.invite_webhook_url
        self._from_email = config.invite_from_email
        self._timeout = config.invite_timeout_seconds
        self._client = client

    def send_invite(self, *, event_id: str, event_name: str, email: str, message: str | None = None) -> bool:
        if not self._url:
            LOGGER.info("No invite webhook configured; skipping invite for event %s", event_id)
            return False

        payload = {
            "from": self._from_email,
            "to": [email],
            "subject": f"Please join my event {event_name}",
            "event_id": event_id,
            "message": message or "",
        }
        try:
            if self._client is not None:
                response = self._client.post(self._url, json=payload, timeout=self._timeout)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            LOGGER.warning("Failed to send invite for event %s: %s", event_id, exc)
            return False
        return True
