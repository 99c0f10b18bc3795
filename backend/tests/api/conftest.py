"""API-specific test fixtures."""

import time
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import jwt as pyjwt
import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from solarops.api.deps import get_notifier
from solarops.api.routes import api_router
from solarops.core.config import get_settings
from solarops.core.exceptions import SolarOpsError
from solarops.db import close_db, init_db
from solarops.main import generic_exception_handler, http_exception_handler, solarops_exception_handler
from solarops.middleware.correlation import setup_correlation_middleware
from solarops.services.notifier import BroadcastNotifier


def make_token(role: str, user_id: str = "user-test-001", name: str = "Test User", ttl: int = 3600) -> str:
    """Sign a session JWT the way the auth service issues them."""
    settings = get_settings()
    now = int(time.time())
    payload = {"id": user_id, "role": role, "name": name, "iat": now, "exp": now + ttl}
    return pyjwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _auth_headers(role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role)}"}


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a role."""
    return _auth_headers


@pytest.fixture
def token_for():
    return make_token


@pytest.fixture
def published():
    """Redis stand-in shared by every request's notifier."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def api_client(tmp_path, published):
    """FastAPI test client with a throwaway SQLite database.

    Initializes the global database via init_db inside the TestClient's
    own event loop so the session dependency can use get_session_factory().
    """
    db_url = f"sqlite+aiosqlite:///{tmp_path / 'solarops_api.db'}"

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        import solarops.db.base as db_mod

        db_mod._engine = None
        db_mod._session_factory = None
        await init_db(db_url)
        yield
        await close_db()

    app = FastAPI(title="SolarOps - Test Client", lifespan=test_lifespan)

    setup_correlation_middleware(app)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(SolarOpsError)(solarops_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)
    app.include_router(api_router, prefix="/api")

    app.dependency_overrides[get_notifier] = lambda: BroadcastNotifier(published, channel="system")

    with TestClient(app) as client:
        yield client


@pytest.fixture
def created_project(api_client) -> str:
    """Register a client through the API and return its project id."""
    response = api_client.post(
        "/api/clients",
        json={"name": "Carlos Mendes", "city": "Sorocaba", "state": "SP"},
        headers=_auth_headers("COMMERCIAL"),
    )
    assert response.status_code == 201
    return response.json()["project_id"]
