from __future__ import annotations

import logging

import uvicorn

from shared.runtime import log_level, server_settings


if __name__ == "__main__":
    logging.basicConfig(
        level=log_level("CAMPAIGN").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("campaign.main:create_app", factory=True, **server_settings("CAMPAIGN", 8080))
