"""
tests/conftest.py -- Shared test fixtures for Intrevue.

This module provides:
  - Services: the in-memory fakes from tests/fakes.py wired the way
    api/main.py wires the real clients
  - _patch_lifespan(): puts a Services set on app.state, bypassing Firebase
  - services: a fresh Services set per test
  - client: TestClient over the real app with the patched lifespan
  - signed_in: (client, services, uid) with a seeded user and a live cookie

The environment must be set before any core/ import so get_settings() builds
a development Settings (no Firebase project required, insecure cookies so
the TestClient cookie jar keeps them over plain http).

TestClient uses base_url http://localhost because TrustedHostMiddleware only
admits the configured hosts, and the default "testserver" is not one of them.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.session import SESSION_COOKIE, SessionManager
from auth.store import UserStore
from core.config import Settings
from docstore.store import USERS
from fakes import FakeIdentityProvider, FakeScoringClient, MemoryDocumentStore, full_model_response

# Rate limits are covered by slowapi itself; keep them out of functional tests.
limiter.enabled = False


# ---------------------------------------------------------------------------
# Service set
# ---------------------------------------------------------------------------


@dataclass
class Services:
    identity: FakeIdentityProvider
    store: MemoryDocumentStore
    users: UserStore
    sessions: SessionManager
    scorer: FakeScoringClient


def make_services(settings: Settings | None = None) -> Services:
    settings = settings or Settings(environment="development")
    identity = FakeIdentityProvider()
    store = MemoryDocumentStore()
    users = UserStore(store)
    return Services(
        identity=identity,
        store=store,
        users=users,
        sessions=SessionManager(identity, users, settings),
        scorer=FakeScoringClient(response=full_model_response()),
    )


def _patch_lifespan(services: Services):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.identity = services.identity
        app.state.store = services.store
        app.state.users = services.users
        app.state.sessions = services.sessions
        app.state.scorer = services.scorer
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def services() -> Services:
    return make_services()


@pytest.fixture
def client(services: Services) -> Generator[TestClient, None, None]:
    app.router.lifespan_context = _patch_lifespan(services)
    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def signed_in(client: TestClient, services: Services) -> tuple[TestClient, Services, str]:
    """Yield (client, services, uid) for a user with a valid session cookie."""
    uid = "uid-ada"
    services.store.seed(
        USERS, uid, {"name": "Ada", "email": "ada@example.com", "createdAt": "2024-01-01T00:00:00+00:00"}
    )
    client.cookies.set(SESSION_COOKIE, services.identity.issue_cookie(uid, "ada@example.com"))
    return client, services, uid
