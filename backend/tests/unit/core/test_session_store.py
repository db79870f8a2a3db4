"""Tests for the Redis session store."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from dealerhub.core.exceptions import UpstreamUnavailableException
from dealerhub.core.session_store import SessionStore
from dealerhub.schemas import SessionData


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    with patch("dealerhub.core.session_store.redis_client") as mock:
        mock.client = AsyncMock()
        mock.client.get = AsyncMock(return_value=None)
        mock.client.setex = AsyncMock(return_value=True)
        mock.client.delete = AsyncMock(return_value=1)
        mock.client.expire = AsyncMock(return_value=True)
        yield mock


@pytest.fixture
def store(test_logger):
    """Session store with a one hour TTL."""
    return SessionStore(ttl_seconds=3600, logger=test_logger)


def _payload(user_id, organization_id=None):
    return SessionData(
        user_id=user_id,
        current_organization_id=organization_id,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    ).model_dump_json()


@pytest.mark.asyncio
async def test_create_writes_session_with_ttl(store, mock_redis, organization_id):
    """New sessions are stored under session:{token} with the configured TTL."""
    user_id = uuid4()

    token = await store.create(user_id, organization_id)

    key, ttl, raw = mock_redis.client.setex.call_args.args
    assert key == f"session:{token}"
    assert ttl == 3600
    data = json.loads(raw)
    assert data["user_id"] == str(user_id)
    assert data["current_organization_id"] == str(organization_id)


@pytest.mark.asyncio
async def test_create_issues_distinct_tokens(store, mock_redis):
    """Every session gets a fresh token."""
    user_id = uuid4()
    tokens = {await store.create(user_id) for _ in range(5)}
    assert len(tokens) == 5


@pytest.mark.asyncio
async def test_get_returns_session(store, mock_redis, organization_id):
    """Stored payloads are parsed into SessionData."""
    user_id = uuid4()
    mock_redis.client.get.return_value = _payload(user_id, organization_id)

    session = await store.get("abc")

    assert session.user_id == user_id
    assert session.current_organization_id == organization_id
    mock_redis.client.get.assert_awaited_once_with("session:abc")


@pytest.mark.asyncio
async def test_get_missing_session(store, mock_redis):
    """Unknown or expired tokens yield None."""
    assert await store.get("expired") is None


@pytest.mark.asyncio
async def test_get_corrupt_session(store, mock_redis):
    """Corrupt payloads are discarded."""
    mock_redis.client.get.return_value = '{"user_id": "not-a-uuid"}'
    assert await store.get("abc") is None


@pytest.mark.asyncio
async def test_get_redis_error_raises(store, mock_redis):
    """A Redis failure is reported as upstream unavailable, not as a missing session."""
    mock_redis.client.get.side_effect = ConnectionError("Redis connection failed")

    with pytest.raises(UpstreamUnavailableException):
        await store.get("abc")


@pytest.mark.asyncio
async def test_set_current_organization(store, mock_redis, organization_id):
    """Switching rewrites the session with the new organization."""
    user_id = uuid4()
    mock_redis.client.get.return_value = _payload(user_id, uuid4())

    updated = await store.set_current_organization("abc", organization_id)

    assert updated.current_organization_id == organization_id
    key, ttl, raw = mock_redis.client.setex.call_args.args
    assert key == "session:abc"
    assert json.loads(raw)["current_organization_id"] == str(organization_id)


@pytest.mark.asyncio
async def test_set_current_organization_missing_session(store, mock_redis, organization_id):
    """Nothing is written for a session that no longer exists."""
    assert await store.set_current_organization("gone", organization_id) is None
    mock_redis.client.setex.assert_not_awaited()


@pytest.mark.asyncio
async def test_touch_and_destroy(store, mock_redis):
    """Touch extends the TTL and destroy deletes the key."""
    assert await store.touch("abc") is True
    mock_redis.client.expire.assert_awaited_once_with("session:abc", 3600)

    await store.destroy("abc")
    mock_redis.client.delete.assert_awaited_once_with("session:abc")


@pytest.mark.asyncio
async def test_touch_error_is_not_fatal(store, mock_redis):
    """Failing to extend a session is logged and reported as False."""
    mock_redis.client.expire.side_effect = ConnectionError("Redis connection failed")
    assert await store.touch("abc") is False
