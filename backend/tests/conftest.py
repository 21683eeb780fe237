"""Pytest configuration and shared fixtures."""

import os

# Set required environment variables for testing BEFORE importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from autoheal.config import get_settings
from autoheal.db.database import Database
from autoheal.main import app
from autoheal.storage import SQLStorage


@pytest.fixture
def database_url(tmp_path, monkeypatch) -> str:
    """Point the app at a throwaway SQLite file for one test."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'autoheal.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    # Pull requests stay off unless a test wires in a fake GitHub
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_REPO", raising=False)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest.fixture
def test_client(database_url) -> TestClient:
    """FastAPI test client with startup/shutdown run against the test database."""
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def auth_client(test_client: TestClient) -> TestClient:
    """Test client carrying a session cookie for user 'alice'."""
    response = test_client.post(
        "/api/auth/register", json={"username": "alice", "password": "wonderland"}
    )
    assert response.status_code == 201
    return test_client


@pytest_asyncio.fixture
async def storage(database_url):
    """SQL storage adapter bound to a fresh database, for adapter-level tests."""
    database = Database(database_url)
    await database.connect()
    await database.create_all()
    async with database.session() as session:
        yield SQLStorage(session)
    await database.disconnect()


@pytest.fixture
def failure_payload() -> dict:
    """Failure report as posted by the Cypress plugin."""
    return {
        "runId": "run-1",
        "repo": "demo",
        "branch": "main",
        "commit": "abc123def",
        "suite": "authentication",
        "test": "user login flow",
        "specPath": "cypress/e2e/login-test.cy.js",
        "browser": "chrome",
        "viewport": "1280x720",
        "screenshotPath": "cypress/screenshots/login.png",
        "domHtml": '<div class="login-form">\n  <button class="login-btn">Login</button>\n</div>',
        "consoleLogs": [
            {"level": "warn", "message": "slow render", "timestamp": 1700000000000},
            {"level": "error", "message": "Expected to find element", "timestamp": 1700000000500},
        ],
        "networkLogs": [
            {"method": "GET", "url": "/", "status": 200, "timestamp": 1700000000100},
            {"method": "POST", "url": "/api/auth/login", "status": 0, "timestamp": 1700000000200},
        ],
        "currentSelector": "[data-testid=login-submit-button]",
        "selectorContext": {
            "element": "button",
            "text": "Login",
            "className": "login-btn",
            "position": {"x": 150, "y": 300},
        },
        "errorMessage": "Timed out retrying after 5000ms",
    }


@pytest.fixture
def create_failure(test_client: TestClient, failure_payload: dict):
    """Factory that ingests a failure and returns its JSON body."""
    def _create(**overrides) -> dict:
        response = test_client.post("/api/failures", json={**failure_payload, **overrides})
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def create_suggestion(test_client: TestClient):
    """Factory that records a suggestion for a failure id."""
    def _create(failure_id: str, candidates: list[dict] | None = None, **extra) -> dict:
        body = {
            "failureId": failure_id,
            "candidates": candidates or [
                {"selector": "[data-testid=submit-btn]", "confidence": 0.9},
            ],
            **extra,
        }
        response = test_client.post("/api/suggestions", json=body)
        assert response.status_code == 201, response.text
        return response.json()
    return _create
