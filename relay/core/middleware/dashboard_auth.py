from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from relay.core.config.settings import get_settings
from relay.core.errors import dashboard_error
from relay.modules.dashboard_auth.gate import credentials_from_request
from relay.modules.dashboard_auth.service import DashboardAuthService


def add_dashboard_auth_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def dashboard_auth_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        service = DashboardAuthService(get_settings())
        outcome = service.authorize(credentials_from_request(request))
        if not outcome.allowed:
            return JSONResponse(
                status_code=401,
                content=dashboard_error("unauthorized", "A valid session token or API key is required"),
            )
        request.state.dashboard_auth = outcome
        return await call_next(request)
