from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import Any


class TokenError(ValueError):
    pass


class InvalidSignature(TokenError):
    pass


class MalformedToken(TokenError):
    pass


@dataclass(frozen=True)
class Claim:
    user_id: str
    event_id: str | None = None

    @property
    def is_scoped(self) -> bool:
        return self.event_id is not None

    def allows_event(self, event_id: str) -> bool:
        if self.event_id is None:
            return True
        return self.event_id == event_id

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"user_id": self.user_id}
        if self.event_id is not None:
            payload["event_id"] = self.event_id
        return payload


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * ((4 - (len(text) % 4)) % 4)
    return base64.urlsafe_b64decode((text + padding).encode("ascii"))


class ClaimService:
    """Signs and verifies identity claims with a single shared secret.

    Tokens are ``<base64 body>.<base64 hmac-sha256>`` over the canonical JSON
    form of the claim, so issuing the same claim twice yields the same token.
    Nothing is stored server side.
    """

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("secret must not be empty")
        self._key = secret.encode("utf-8")

    def _sign(self, body: bytes) -> bytes:
        return hmac.new(self._key, body, hashlib.sha256).digest()

    def issue(self, claim: Claim) -> str:
        body = json.dumps(claim.to_payload(), separators=(",", ":"), sort_keys=True).encode("utf-8")
        return f"{_b64encode(body)}.{_b64encode(self._sign(body))}"

    def verify(self, token: str) -> Claim:
        try:
            body_part, signature_part = token.split(".", 1)
            body = _b64decode(body_part)
            signature = _b64decode(signature_part)
        except (AttributeError, ValueError, binascii.Error) as exc:
            raise MalformedToken("Malformed token") from exc

        if not hmac.compare_digest(signature, self._sign(body)):
            raise InvalidSignature("Invalid token signature")

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedToken("Invalid token body") from exc

        if not isinstance(payload, dict):
            raise MalformedToken("Invalid token payload")

        user_id = payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise MalformedToken("Token is missing user_id")
        event_id = payload.get("event_id")
        if event_id is not None and not isinstance(event_id, str):
            raise MalformedToken("Invalid token event_id")
        return Claim(user_id=user_id, event_id=event_id)
