"""
pytest configuration and fixtures.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from userhub.server import config
from userhub.server.server import create_app


@pytest.fixture
def database_url(tmp_path) -> str:
    """SQLite database file unique to each test."""
    return f"sqlite:///{tmp_path / 'userhub.db'}"


@pytest.fixture
def client(database_url) -> Generator[TestClient, None, None]:
    """Test client with the application lifespan (migrations) already run."""
    with TestClient(create_app(database_url)) as test_client:
        yield test_client


@pytest.fixture
def fresh_settings(monkeypatch):
    """Drop the cached settings so each test reads its own environment."""
    monkeypatch.setattr(config, "_settings", None)
    for name in ("DATABASE_URL", "HOST", "PORT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ann(client) -> dict:
    """A user created through the API."""
    response = client.post("/users", json={"name": "Ann", "email": "ann@x.com"})
    assert response.status_code == 201
    return response.json()
