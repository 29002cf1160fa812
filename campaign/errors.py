from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

LOGGER = logging.getLogger(__name__)


class CampaignError(RuntimeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthorized(CampaignError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class Forbidden(CampaignError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed"


class NotFound(CampaignError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationError(CampaignError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class StoreFailure(CampaignError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Store unavailable"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CampaignError)
    async def _handle_campaign_error(request: Request, exc: CampaignError) -> JSONResponse:
        if exc.status_code >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__)
        else:
            LOGGER.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
