"""Fixtures for driving the FastAPI app in-process."""

from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dealerhub.api import deps
from dealerhub.main import app


@pytest.fixture
def api_db(mock_db):
    """Database session handed to endpoints."""
    return mock_db


@pytest.fixture
def auth_state():
    """Mutable holder for the context returned by the auth dependency."""
    return MagicMock(ctx=None)


@pytest_asyncio.fixture
async def client(api_db, auth_state):
    """HTTP client against the app with the database and auth overridden."""

    async def _get_db():
        yield api_db

    async def _get_auth_context():
        return auth_state.ctx

    app.dependency_overrides[deps.get_db] = _get_db
    app.dependency_overrides[deps.get_auth_context] = _get_auth_context
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
