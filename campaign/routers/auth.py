from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from shared.schemas import JoinRequest, JoinResponse, LoginRequest, ScopedTokenResponse, TokenValidityResponse
from shared.security import Claim

from ..dependencies import get_account_service, get_event_service
from ..services.auth import AccountService, AuthContext, require_auth_context, require_unscoped_auth_context
from ..services.events import EventService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/join", response_model=JoinResponse)
def join(body: JoinRequest, accounts: AccountService = Depends(get_account_service)) -> JoinResponse:
    success, message = accounts.join(body)
    return JoinResponse(success=success, message=message)


@router.post("/login")
def login(body: LoginRequest, accounts: AccountService = Depends(get_account_service)) -> dict:
    return accounts.login(body.email, body.password)


@router.get("/profile")
def profile(
    auth: AuthContext = Depends(require_unscoped_auth_context),
    accounts: AccountService = Depends(get_account_service),
) -> dict:
    return accounts.overview(auth.user_id)


@router.get("/token/{event_id}", response_model=ScopedTokenResponse)
def issue_event_token(
    event_id: str,
    request: Request,
    auth: AuthContext = Depends(require_unscoped_auth_context),
    events: EventService = Depends(get_event_service),
) -> ScopedTokenResponse:
    events.view(auth.actor, event_id)
    token = request.app.state.claims.issue(Claim(user_id=auth.user_id, event_id=event_id))
    return ScopedTokenResponse(token=token)


@router.get("/token/valid/{event_id}", response_model=TokenValidityResponse)
def check_event_token(event_id: str, auth: AuthContext = Depends(require_auth_context)) -> TokenValidityResponse:
    return TokenValidityResponse(allowed=auth.event_id is not None and auth.event_id == event_id)
