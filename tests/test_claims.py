from __future__ import annotations

import hashlib
import hmac

import pytest

from shared.security import Claim, ClaimService, InvalidSignature, MalformedToken, TokenError, _b64encode


def _signed(secret: str, body: bytes) -> str:
    signature = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return f"{_b64encode(body)}.{_b64encode(signature)}"


def test_issue_is_deterministic_and_verifies() -> None:
    service = ClaimService("secret-1")
    first = service.issue(Claim(user_id="u-1"))
    second = service.issue(Claim(user_id="u-1"))

    assert first == second
    assert service.verify(first) == Claim(user_id="u-1")


def test_scoped_claim_round_trips_event_id() -> None:
    service = ClaimService("secret-1")
    claim = service.verify(service.issue(Claim(user_id="u-1", event_id="event-9")))

    assert claim.event_id == "event-9"
    assert claim.is_scoped
    assert claim.allows_event("event-9")
    assert not claim.allows_event("event-10")


def test_unscoped_claim_allows_any_event() -> None:
    assert Claim(user_id="u-1").allows_event("anything")


def test_token_from_other_secret_is_rejected() -> None:
    token = ClaimService("secret-1").issue(Claim(user_id="u-1"))

    with pytest.raises(InvalidSignature):
        ClaimService("secret-2").verify(token)


def test_tampered_body_is_rejected() -> None:
    service = ClaimService("secret-1")
    token = service.issue(Claim(user_id="u-1"))
    forged_body = _b64encode(b'{"user_id":"u-2"}')
    forged = f"{forged_body}.{token.split('.', 1)[1]}"

    with pytest.raises(InvalidSignature):
        service.verify(forged)


@pytest.mark.parametrize("token", ["", "not-a-token"])
def test_undecodable_token_is_malformed(token: str) -> None:
    with pytest.raises(MalformedToken):
        ClaimService("secret-1").verify(token)


@pytest.mark.parametrize(
    "body",
    [b"not json", b"[1, 2, 3]", b'{"event_id": "e-1"}', b'{"user_id": 7}', b'{"user_id": "u", "event_id": 3}'],
)
def test_signed_but_invalid_payload_is_malformed(body: bytes) -> None:
    with pytest.raises(MalformedToken):
        ClaimService("secret-1").verify(_signed("secret-1", body))


def test_token_errors_share_a_base_class() -> None:
    assert issubclass(InvalidSignature, TokenError)
    assert issubclass(MalformedToken, TokenError)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        ClaimService("")
