"""
Shared pytest fixtures available to every test file automatically.
No imports needed in test files: pytest discovers this by convention.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from tortoise import Tortoise, connections

from facility_bookings.deps import get_current_user
from facility_bookings.routers import ROUTERS
from facility_bookings.settings import TORTOISE_MODULES

from .factories import make_claims

# ---------------------------------------------------------------------------
# Database: fresh in-memory SQLite per test
# ---------------------------------------------------------------------------


@pytest.fixture()
async def db():
    await Tortoise.init(db_url="sqlite://:memory:", modules=TORTOISE_MODULES)
    await Tortoise.generate_schemas()
    yield
    await connections.close_all()


# ---------------------------------------------------------------------------
# App builder: used by all client fixtures
# ---------------------------------------------------------------------------


def _bare_app() -> FastAPI:
    app = FastAPI()
    for router in ROUTERS:
        app.include_router(router)
    return app


def build_app(claims) -> FastAPI:
    """
    Fresh FastAPI app with `get_current_user` overridden to return `claims`
    unconditionally. The authorized layer is patched per test.
    """
    app = _bare_app()

    async def _claims():
        return claims

    app.dependency_overrides[get_current_user] = _claims
    return app


# ---------------------------------------------------------------------------
# Reusable client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def client():
    return TestClient(build_app(make_claims()), raise_server_exceptions=True)


@pytest.fixture()
def anon_app():
    """
    Bare app with NO dependency overrides.
    Use this when you want the real identity dependency to run so you can assert 401/422.
    """
    return _bare_app()


@pytest.fixture()
def client_factory():
    def _make(claims) -> TestClient:
        return TestClient(build_app(claims), raise_server_exceptions=True)

    return _make
