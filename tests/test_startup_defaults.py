from __future__ import annotations

import httpx
import pytest

from campaign.config import load_config
from campaign.main import create_app
from campaign.services.notifications import InviteNotifier
from shared.runtime import server_settings
from shared.security import Claim


def test_default_secret_is_refused_without_insecure_override(monkeypatch) -> None:
    monkeypatch.delenv("CAMPAIGN_SECRET_KEY", raising=False)
    monkeypatch.delenv("ALLOW_INSECURE_DEFAULTS", raising=False)

    with pytest.raises(RuntimeError):
        load_config()


def test_insecure_override_allows_default_secret(monkeypatch) -> None:
    monkeypatch.delenv("CAMPAIGN_SECRET_KEY", raising=False)
    monkeypatch.setenv("ALLOW_INSECURE_DEFAULTS", "1")

    config = load_config()
    assert config.secret_key == "jwt_super_secret_password"
    assert config.database_url == "sqlite:///./campaign.db"


def test_membership_write_attempts_is_clamped(monkeypatch) -> None:
    monkeypatch.setenv("ALLOW_INSECURE_DEFAULTS", "1")
    monkeypatch.setenv("CAMPAIGN_MEMBERSHIP_WRITE_ATTEMPTS", "0")
    assert load_config().membership_write_attempts == 1

    monkeypatch.setenv("CAMPAIGN_MEMBERSHIP_WRITE_ATTEMPTS", "not-a-number")
    assert load_config().membership_write_attempts == 5


def test_app_enables_cors_and_carries_injected_secret(config) -> None:
    app = create_app(config)

    middleware_names = {middleware.cls.__name__ for middleware in app.user_middleware}
    assert "CORSMiddleware" in middleware_names
    token = app.state.claims.issue(Claim(user_id="u-1"))
    assert app.state.claims.verify(token).user_id == "u-1"


def test_invite_notifier_posts_to_webhook(config, monkeypatch) -> None:
    monkeypatch.setenv("CAMPAIGN_INVITE_WEBHOOK_URL", "https://mail.example.com/send")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        notifier = InviteNotifier(load_config(), client=client)
        assert notifier.send_invite(event_id="event-1", event_name="Gala", email="a@b.com")

    assert str(seen[0].url) == "https://mail.example.com/send"
    assert b"a@b.com" in seen[0].content


def test_invite_notifier_reports_delivery_failure(config, monkeypatch) -> None:
    monkeypatch.setenv("CAMPAIGN_INVITE_WEBHOOK_URL", "https://mail.example.com/send")

    with httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503))) as client:
        notifier = InviteNotifier(load_config(), client=client)
        assert notifier.send_invite(event_id="event-1", event_name="Gala", email="a@b.com") is False


def test_server_settings_read_campaign_environment(monkeypatch) -> None:
    monkeypatch.delenv("CAMPAIGN_HOST", raising=False)
    monkeypatch.setenv("CAMPAIGN_PORT", "9090")
    monkeypatch.setenv("CAMPAIGN_WORKERS", "0")
    monkeypatch.setenv("CAMPAIGN_LOG_LEVEL", "verbose")

    settings = server_settings("CAMPAIGN", 8080)

    assert settings["port"] == 9090
    assert settings["workers"] == 1
    assert settings["log_level"] == "info"
    assert settings["host"] == "127.0.0.1"
