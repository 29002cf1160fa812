from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from campaign.config import CampaignConfig, load_config
from campaign.db import create_db_engine, create_session_factory, init_db
from campaign.main import create_app
from campaign.models import Event
from campaign.services.auth import hash_secret
from campaign.services.store import PrincipalStore


@pytest.fixture
def config(tmp_path: Path, monkeypatch) -> CampaignConfig:
    monkeypatch.setenv("CAMPAIGN_DATABASE_URL", f"sqlite:///{tmp_path / 'campaign.db'}")
    monkeypatch.setenv("CAMPAIGN_SECRET_KEY", "test-signing-secret")
    monkeypatch.delenv("CAMPAIGN_INVITE_WEBHOOK_URL", raising=False)
    monkeypatch.delenv("CAMPAIGN_MEMBERSHIP_WRITE_ATTEMPTS", raising=False)
    return load_config()


@pytest.fixture
def session_factory(config: CampaignConfig) -> Iterator[sessionmaker[Session]]:
    engine = create_db_engine(config)
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db: Session) -> Callable[..., str]:
    def _make(email: str, password: str = "password-1", **fields: str) -> str:
        row = PrincipalStore(db).create_user(email=email, password_hash=hash_secret(password), **fields)
        db.commit()
        return row.id

    return _make


@pytest.fixture
def make_event(db: Session) -> Callable[..., str]:
    def _make(
        creator_id: str,
        *,
        private: bool = True,
        admin_ids: list[str] | None = None,
        member_ids: list[str] | None = None,
        name: str = "Spring Gala",
    ) -> str:
        row = Event(
            type="Fundraiser",
            name=name,
            visibility="private" if private else "public",
            created_by_id=creator_id,
            admin_ids=admin_ids if admin_ids is not None else [f"user:{creator_id}"],
            member_ids=member_ids or [],
        )
        db.add(row)
        db.commit()
        return row.id

    return _make


@pytest.fixture
def client(config: CampaignConfig) -> Iterator[TestClient]:
    app = create_app(config)
    with TestClient(app) as test_client:
        yield test_client
