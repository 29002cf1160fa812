from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.security import ClaimService

from .config import CampaignConfig, load_config
from .db import create_db_engine, create_session_factory, init_db
from .errors import register_exception_handlers
from .routers import auth, events
from .services.notifications import InviteNotifier

LOGGER = logging.getLogger(__name__)


def create_app(config: CampaignConfig | None = None) -> FastAPI:
    config = config or load_config()
    engine = create_db_engine(config)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        init_db(engine)
        LOGGER.info("Campaign service ready")
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title="Campaign Events", version="1.0.0", lifespan=lifespan)
    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.claims = ClaimService(config.secret_key)
    app.state.notifier = InviteNotifier(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(events.router)

    @app.get("/")
    def index() -> dict[str, str]:
        return {"service": "campaign", "status": "ok"}

    return app
