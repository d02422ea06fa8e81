from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse

from relay.core.auth.errors import InvalidCodeError, InvalidCredentialError, InvalidOrExpiredTokenError
from relay.core.errors import dashboard_error
from relay.core.utils.request_id import get_request_id
from relay.dependencies import DashboardAuthContext, get_dashboard_auth_context
from relay.modules.dashboard_auth.gate import DASHBOARD_SESSION_COOKIE, credentials_from_request
from relay.modules.dashboard_auth.schemas import AuthRequest, AuthResponse, DashboardAuthSessionResponse
from relay.modules.dashboard_auth.service import TOTP_STEP, TotpNotConfiguredError
from relay.modules.dashboard_auth.types import AuthorizationOutcome, AuthScheme

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard-auth"])
api_router = APIRouter(prefix="/api", tags=["dashboard"])


@router.post("/auth", response_model=AuthResponse, response_model_exclude_none=True)
async def login(
    request: Request,
    payload: AuthRequest | None = Body(default=None),
    context: DashboardAuthContext = Depends(get_dashboard_auth_context),
) -> JSONResponse:
    # An empty body is a login attempt without a key.
    request_body = payload or AuthRequest()
    try:
        result = context.service.login(request_body.key, request_body.code)
    except InvalidCredentialError:
        logger.info("Dashboard login rejected reason=invalid_key request_id=%s", get_request_id())
        return JSONResponse(status_code=401, content=AuthResponse(ok=False).model_dump(exclude_none=True))
    except InvalidCodeError:
        logger.info("Dashboard login rejected reason=invalid_code request_id=%s", get_request_id())
        return JSONResponse(
            status_code=401,
            content=AuthResponse(ok=False, step=TOTP_STEP).model_dump(exclude_none=True),
        )

    body = AuthResponse(ok=result.ok, step=result.step, token=result.token)
    response = JSONResponse(status_code=200, content=body.model_dump(exclude_none=True))
    if result.token is not None:
        logger.info("Dashboard session issued request_id=%s", get_request_id())
        sessions = context.service.sessions
        max_age = sessions.ttl_seconds if sessions is not None else None
        _set_session_cookie(response, result.token, request, max_age=max_age)
    return response


@router.post("/auth/logout")
async def logout() -> JSONResponse:
    # Tokens are stateless: clearing the cookie is all logout can do.
    response = JSONResponse(status_code=200, content={"ok": True})
    response.delete_cookie(key=DASHBOARD_SESSION_COOKIE, path="/")
    return response


@router.get("/setup", response_class=HTMLResponse, response_model=None)
async def setup(
    request: Request,
    context: DashboardAuthContext = Depends(get_dashboard_auth_context),
) -> HTMLResponse | JSONResponse:
    credentials = credentials_from_request(request, allow_query_key=False)
    if not context.service.authorize_setup(credentials).allowed:
        return JSONResponse(
            status_code=401,
            content=dashboard_error("unauthorized", "A valid API key is required"),
        )
    try:
        page = context.service.setup_page()
    except TotpNotConfiguredError as exc:
        return JSONResponse(
            status_code=503,
            content=dashboard_error("totp_not_configured", str(exc)),
        )
    return HTMLResponse(content=page, headers={"Cache-Control": "no-store"})


@api_router.get("/session", response_model=DashboardAuthSessionResponse)
async def get_session(
    request: Request,
    context: DashboardAuthContext = Depends(get_dashboard_auth_context),
) -> DashboardAuthSessionResponse:
    outcome: AuthorizationOutcome | None = getattr(request.state, "dashboard_auth", None)
    if outcome is None:
        outcome = context.service.authorize(credentials_from_request(request))
    expires_at: int | None = None
    sessions = context.service.sessions
    if outcome.scheme is AuthScheme.SESSION_TOKEN and sessions is not None:
        try:
            expires_at = sessions.require(credentials_from_request(request).session_token).expires_at
        except InvalidOrExpiredTokenError:
            expires_at = None
    return DashboardAuthSessionResponse(
        authenticated=outcome.allowed,
        scheme=outcome.scheme.value if outcome.scheme is not None else "none",
        expires_at=expires_at,
    )


def _set_session_cookie(response: JSONResponse, token: str, request: Request, *, max_age: int | None) -> None:
    response.set_cookie(
        key=DASHBOARD_SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
        max_age=max_age,
        path="/",
    )
