from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from questlog.core.config import Settings
from questlog.main import create_app


@pytest.fixture()
def client(tmp_path) -> Generator[TestClient, None, None]:
    db_path = tmp_path / "test.db"
    settings = Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{db_path}",
        jwt_secret="test-secret-key-1234567890",
        cors_origins=["*"],
    )
    app = create_app(settings)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def register(client) -> Callable[..., dict[str, str]]:
    def _register(email: str, name: str = "Hero") -> dict[str, str]:
        response = client.post(
            "/api/v1/auth/register",
            json={"name": name, "email": email, "password": "SuperSecret123"},
        )
        assert response.status_code == 201
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _register
