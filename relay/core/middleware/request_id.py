from __future__ import annotations

from collections.abc import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import Response

from relay.core.utils.request_id import reset_request_id, set_request_id

REQUEST_ID_HEADER = "x-request-id"
_INBOUND_REQUEST_ID_HEADERS = (REQUEST_ID_HEADER, "request-id")
_MAX_REQUEST_ID_LENGTH = 128


def resolve_request_id(request: Request) -> str:
    for header in _INBOUND_REQUEST_ID_HEADERS:
        value = request.headers.get(header, "").strip()
        # Twilio and proxies send their own ids; anything unprintable or oversized is replaced.
        if value and len(value) <= _MAX_REQUEST_ID_LENGTH and value.isprintable():
            return value
    return str(uuid4())


def add_request_id_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def request_id_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = resolve_request_id(request)
        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response
