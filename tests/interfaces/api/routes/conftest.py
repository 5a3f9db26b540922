"""Fixtures for exercising the HTTP API."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from crm_notifications.config import reset_settings_cache
from main import create_app


@pytest.fixture()
def client():
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def login(client: TestClient, password: str):
    """Return bearer headers for the user owning ``email``."""

    def _login(email: str) -> dict[str, str]:
        response = client.post("/auth/token", data={"username": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


@pytest.fixture()
def cron_secret(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CRON_SECRET_TOKEN", "cron-secret")
    reset_settings_cache()
    yield "cron-secret"
    reset_settings_cache()
