"""
Pytest configuration and shared fixtures.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from habitstopper_api.main import create_app
from habitstopper_api.settings import Settings

BACKEND_SECRET = "test-backend-secret"


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'habitstopper.db'}",
        backend_session_secret=BACKEND_SECRET,
        client_origin="http://localhost:8501",
    )


@pytest.fixture
def oauth_settings(settings):
    return settings.model_copy(
        update={
            "google_client_id": "client-id",
            "google_client_secret": "client-secret",
        }
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """Headers the Streamlit dashboard sends for a signed-in user."""
    return {
        "X-Backend-Token": BACKEND_SECRET,
        "X-User-Subject": "google-123",
        "X-User-Email": "Ana.Souza@example.com",
        "X-User-Name": "Ana Souza",
    }


@pytest.fixture
def fixed_today():
    return date(2024, 3, 15)
