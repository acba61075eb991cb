"""
tests/conftest.py -- Shared test fixtures for Armory.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for users + assets
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus tokens for one user per role/base combination
  - user_store / asset_store / tokens: plain unit-test objects

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the API fixture because TestClient runs sync route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

The DEBUG env var must be set before any api/ import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any core/api import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_services
from auth.credentials import CredentialStore
from auth.store import UserStore
from auth.tokens import TokenService
from inventory.store import AssetStore

TEST_SECRET = "test-secret-key-that-is-at-least-32-chars"

# (username, name, role, base) -- every account the API fixture creates.
# All share the password TEST_PASSWORD.
TEST_PASSWORD = "testpass123"
TEST_USERS = [
    ("admin", "Test Admin", "admin", "HQ"),
    ("alpha_cmd", "Alpha Commander", "commander", "Alpha"),
    ("bravo_cmd", "Bravo Commander", "commander", "Bravo"),
    ("alpha_officer", "Alpha Officer", "officer", "Alpha"),
]


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, AssetStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    assets_url = f"sqlite:///file:test_assets_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(users_url), AssetStore(assets_url)


def _patch_lifespan(user_store: UserStore, asset_store: AssetStore, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        wire_services(app, user_store, asset_store, tokens)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def asset_store() -> Generator[AssetStore, None, None]:
    store = AssetStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET, expire_seconds=3600)


# ---------------------------------------------------------------------------
# Module-scoped API fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, dict[str, str], dict[str, int]], None, None]:
    """Yield (client, tokens, user_ids) for API integration tests.

    tokens and user_ids are keyed by username from TEST_USERS. The TestClient
    uses the real FastAPI app with a patched lifespan so tests hit real route
    handlers against isolated in-memory stores.
    """
    user_store, asset_store = _make_test_stores(request.module.__name__.replace(".", "_"))
    token_service = TokenService(TEST_SECRET, expire_seconds=3600)
    credentials = CredentialStore(user_store)

    issued: dict[str, str] = {}
    user_ids: dict[str, int] = {}
    for username, name, role, base in TEST_USERS:
        user = credentials.create(username, TEST_PASSWORD, name, base, role)
        issued[username] = token_service.issue(user)
        user_ids[username] = user.id

    app.router.lifespan_context = _patch_lifespan(user_store, asset_store, token_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, issued, user_ids

    user_store.close()
    asset_store.close()
