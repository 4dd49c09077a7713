"""API test fixtures — FastAPI app over ASGITransport, Supabase faked at the HTTP layer.

Invariants:
    - app.state.http_client replaced by an httpx client on a MockTransport, so the
      real dependency wiring and Supabase client code run end to end
    - get_settings overridden per test via use_settings(**overrides)
    - FakeSupabaseServer.requests records every outbound backend call

Design Decisions:
    - ASGITransport does not run the lifespan: the fixture installs the shared
      client itself (lifespan covered separately in test_app_lifespan.py)
"""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from staff_provisioning.config import Settings, get_settings
from staff_provisioning.main import app

from tests.api.fake_supabase import ANON_KEY, SERVICE_KEY, FakeSupabaseServer


@pytest.fixture
def fake_supabase():
    return FakeSupabaseServer()


@pytest.fixture
def use_settings():
    """Override get_settings; returns the Settings in effect."""
    def _apply(**overrides) -> Settings:
        fields = dict(
            supabase_url="https://backend.test",
            supabase_anon_key=ANON_KEY,
            supabase_service_role_key=SERVICE_KEY,
            invite_redirect_to=None,
            strict_role_mode=False,
        )
        fields.update(overrides)
        settings = Settings(_env_file=None, **fields)
        app.dependency_overrides[get_settings] = lambda: settings
        return settings

    _apply()
    yield _apply
    app.dependency_overrides.clear()


@pytest.fixture
async def client(fake_supabase, use_settings):
    """FastAPI test client with the backend HTTP client on a MockTransport."""
    original = getattr(app.state, "http_client", None)
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_supabase)) as http:
        app.state.http_client = http
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as c:
            yield c
    app.state.http_client = original
