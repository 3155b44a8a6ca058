from __future__ import annotations

import os
from typing import Callable, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient

TEST_ENV = {
    "APP_BASE_URL": "http://localhost:5173",
    "HUBSPOT_CLIENT_ID": "test-client-id",
    "HUBSPOT_CLIENT_SECRET": "test-client-secret",
    "HUBSPOT_REDIRECT_URI": "http://localhost:3000/hubspot/callback",
    "STATE_HMAC_SECRET": "test-state-secret",
}

# app.main validates configuration at import time
for _name, _value in TEST_ENV.items():
    os.environ.setdefault(_name, _value)

from app.config import Settings, get_settings, load_settings  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas.token import TokenRecord  # noqa: E402
from app.services import http_client  # noqa: E402
from app.services import token_store  # noqa: E402
from app.services.token_store import TokenStore, get_token_store  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    return load_settings({**TEST_ENV, "TOKENS_FILE": str(tmp_path / "tokens.json")})


@pytest.fixture
def store(settings: Settings) -> TokenStore:
    return TokenStore(settings.tokens_file)


@pytest.fixture
def connected_store(store: TokenStore) -> TokenStore:
    """Store holding a fresh (not expiring) token for `acme`."""
    store.put(
        "acme",
        TokenRecord(
            hub_id=4242,
            access_token="access-1",
            refresh_token="refresh-1",
            access_expires_at=10**13,
        ),
    )
    return store


class HubSpotRecorder:
    """Captures requests sent to the mocked HubSpot API."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def mock_hubspot(monkeypatch) -> Callable[[Callable[[httpx.Request], httpx.Response]], HubSpotRecorder]:
    """Route every outbound HubSpot call through *handler* instead of the network."""

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> HubSpotRecorder:
        recorder = HubSpotRecorder(handler)
        monkeypatch.setattr(
            http_client,
            "create_client",
            lambda: httpx.AsyncClient(
                transport=httpx.MockTransport(recorder), timeout=http_client.HTTP_TIMEOUT
            ),
        )
        return recorder

    return install


@pytest.fixture
def client(settings: Settings, store: TokenStore, monkeypatch) -> Generator[TestClient, None, None]:
    """Create a test client wired to the per-test settings and token store."""
    # startup loads the process-wide store; keep it off the working directory
    monkeypatch.setattr(token_store, "_store", store)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
