from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from app.config import Settings
from app.database import init_db
from app.main import create_app
from app.services.oauth_service import OAuthClient

APP_URL = "https://app.test"
TOKEN_URL = "https://idp.test/token"
USER_INFO_URL = "https://idp.test/userinfo"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        app_url=APP_URL,
        oauth_client_id="todo-client",
        oauth_client_secret="todo-secret",
        oauth_redirect_url="https://api.test/auth/callback",
        oauth_auth_url="https://idp.test/authorize",
        oauth_token_url=TOKEN_URL,
        oauth_user_info_url=USER_INFO_URL,
        session_signing_key="test-signing-key",
    )
    values.update(overrides)
    return Settings(**values)


def identity_provider(request: httpx.Request) -> httpx.Response:
    if request.url == TOKEN_URL:
        form = parse_qs(request.content.decode())
        if form.get("code") != ["good-code"]:
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(200, json={"access_token": "access-123", "token_type": "Bearer"})
    if request.url == USER_INFO_URL:
        if request.headers.get("Authorization") != "Bearer access-123":
            return httpx.Response(401)
        return httpx.Response(200, json={"sub": "u-1", "preferred_username": "alice"})
    return httpx.Response(404)


@pytest.fixture
def anyio_backend():
    return "asyncio"

@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)

@pytest.fixture
async def initialized_app(settings):
    app = create_app(
        settings,
        oauth_client=OAuthClient(settings, transport=httpx.MockTransport(identity_provider)),
    )
    # recreate tables
    await init_db(app.state.engine)
    yield app
    app.dependency_overrides.clear()
    await app.state.engine.dispose()

@pytest.fixture
async def client(initialized_app):
    async with AsyncClient(transport=ASGITransport(app=initialized_app), base_url="https://test") as ac:
        yield ac


async def login(ac: AsyncClient, code: str = "good-code") -> httpx.Response:
    res = await ac.get("/auth/login")
    state = parse_qs(urlparse(res.headers["location"]).query)["state"][0]
    return await ac.get("/auth/callback", params={"code": code, "state": state})


@pytest.fixture
async def auth_client(client):
    res = await login(client)
    assert res.status_code == 302
    yield client
