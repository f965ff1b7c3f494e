from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from aliasvault.core.config import Settings, get_settings
from aliasvault.main import app
from aliasvault.services.rate_limit import LoginRateLimiter, RateConfig

ORIGIN = "http://localhost:5173"
ADMIN_PASSWORD = "correct horse battery staple"
JWT_SECRET = "test-signing-secret"


@pytest.fixture
def anyio_backend() -> str:
    """Force anyio-based tests to run with asyncio backend only."""

    return "asyncio"


@pytest.fixture(name="settings")
def settings_fixture(tmp_path: Path) -> Settings:
    return Settings(
        settings_store_path=str(tmp_path / "settings.json"),
        database_url=None,
        allowed_origin="https://admin.example.com",
        enforce_origin=True,
    )


@pytest.fixture(name="client")
def client_fixture(settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.login_limiter = LoginRateLimiter(RateConfig())
    with TestClient(app, headers={"Origin": ORIGIN}) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="token")
def token_fixture(client: TestClient) -> str:
    """Run first-time setup and return the token it issues."""

    resp = client.post(
        "/initialize",
        json={
            "admin_password": ADMIN_PASSWORD,
            "addy_api_key": "addy-test-key",
            "jwt_secret": JWT_SECRET,
        },
    )
    assert resp.status_code == 200
    return resp.json()["data"]["token"]


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="admin_password")
def admin_password_fixture() -> str:
    return ADMIN_PASSWORD


@pytest.fixture(name="jwt_secret")
def jwt_secret_fixture() -> str:
    return JWT_SECRET
