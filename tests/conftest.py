from __future__ import annotations

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

TEST_API_KEY = "test-api-key"
# RFC 4226 Appendix D secret "12345678901234567890".
TEST_TOTP_SEED = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

os.environ["RELAY_API_KEY"] = TEST_API_KEY
os.environ["RELAY_TOTP_SEED"] = TEST_TOTP_SEED
os.environ.pop("RELAY_SESSION_SIGNING_KEY", None)

from relay.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def relay_env(monkeypatch):
    monkeypatch.setenv("RELAY_API_KEY", TEST_API_KEY)
    monkeypatch.setenv("RELAY_TOTP_SEED", TEST_TOTP_SEED)
    monkeypatch.delenv("RELAY_SESSION_SIGNING_KEY", raising=False)
    from relay.core.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def frozen_clock(monkeypatch):
    current_epoch = {"value": 1_700_000_000}

    import relay.core.auth.totp as totp_module
    import relay.modules.dashboard_auth.sessions as sessions_module

    monkeypatch.setattr(totp_module, "time", lambda: current_epoch["value"])
    monkeypatch.setattr(sessions_module, "time", lambda: current_epoch["value"])
    return current_epoch


@pytest_asyncio.fixture
async def app_instance():
    return create_app()


@pytest_asyncio.fixture
async def async_client(app_instance):
    async with app_instance.router.lifespan_context(app_instance):
        transport = ASGITransport(app=app_instance)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
