from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from relay.core.config.startup_log import log_startup_config
from relay.core.handlers.exceptions import add_exception_handlers
from relay.core.middleware import (
    add_api_unhandled_error_middleware,
    add_dashboard_auth_middleware,
    add_request_id_middleware,
)
from relay.modules.dashboard_auth import api as dashboard_auth_api
from relay.modules.health import api as health_api
from relay.modules.twilio import api as twilio_api


@asynccontextmanager
async def lifespan(_: FastAPI):
    log_startup_config()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="relay", version="0.1.0", lifespan=lifespan)

    # Starlette runs the last-added middleware first: request id wraps everything.
    add_dashboard_auth_middleware(app)
    add_api_unhandled_error_middleware(app)
    add_request_id_middleware(app)
    add_exception_handlers(app)

    app.include_router(dashboard_auth_api.router)
    app.include_router(dashboard_auth_api.api_router)
    app.include_router(twilio_api.router)
    app.include_router(health_api.router)

    return app


app = create_app()
