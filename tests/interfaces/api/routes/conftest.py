"""Fixtures building an application bound to the per-test database."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from main import create_app
from minicrm.infrastructure.database import get_db
from minicrm.interfaces.api.dependencies import get_session_factory


@pytest.fixture
def app(engine, session_factory, transport_factory):
    application = create_app(
        engine=engine, session_factory=session_factory, transport=transport_factory()
    )

    def _get_db():
        with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(client, default_password):
    """Return a callable producing bearer headers for a user."""

    def _login(user, password: str | None = None) -> dict[str, str]:
        response = client.post(
            "/auth/token",
            data={"username": user.email, "password": password or default_password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
