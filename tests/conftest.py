"""
tests/conftest.py -- Shared test fixtures for AuthForms.

This module provides:
  - instant_backend: SimulatedAuthBackend that answers without delay
  - _patch_lifespan(): wires a test backend and registry into app.state,
    bypassing the real startup
  - api_client: TestClient for API integration tests

Environment variables must be set before any core/ import so get_settings()
caches the test configuration: zero simulated latency, a rate limit tests
cannot exhaust, and one email the simulated backend refuses.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any core/ import -- get_settings() is cached on first call.
os.environ.setdefault("SIMULATED_LATENCY_SECONDS", "0")
os.environ.setdefault("SUBMIT_RATE_LIMIT", "1000/minute")
os.environ.setdefault("SIMULATED_REJECTED_EMAILS", '["rejected@example.com"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.backend import SimulatedAuthBackend
from cache.store import SessionRegistry

REJECTED_EMAIL = "rejected@example.com"


@pytest.fixture
def instant_backend() -> SimulatedAuthBackend:
    """Simulated backend with no delay that refuses REJECTED_EMAIL."""
    return SimulatedAuthBackend(latency=0, rejected_emails=[REJECTED_EMAIL])


def _patch_lifespan(backend: SimulatedAuthBackend, registry: SessionRegistry):
    """Return an async context manager that replaces the real lifespan.

    The purge_task is a long-sleeping coroutine that keeps asyncio happy
    (a real asyncio.Task is required; MagicMock would fail on .cancel()).
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.backend = backend
        app.state.sessions = registry
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, SimulatedAuthBackend, SessionRegistry], None, None]:
    """Yield (client, backend, registry) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers with an instant backend. base_url uses localhost
    so TrustedHostMiddleware accepts the requests.
    """
    backend = SimulatedAuthBackend(latency=0, rejected_emails=[REJECTED_EMAIL])
    registry = SessionRegistry(ttl=600)
    app.router.lifespan_context = _patch_lifespan(backend, registry)

    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as client:
        yield client, backend, registry
