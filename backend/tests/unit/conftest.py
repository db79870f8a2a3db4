"""Unit test conftest for setting up test environment."""

import os

# Set minimal required environment variables before importing any dealerhub modules
# This keeps Settings and logging deterministic during test collection
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("LOCAL_DEVELOPMENT", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone  # noqa: E402
from fnmatch import fnmatch  # noqa: E402
from typing import Dict, List, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402

from dealerhub.core.flag_cache_service import FlagCacheBackend  # noqa: E402
from dealerhub.core.logging import logger  # noqa: E402

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemoryFlagCacheBackend(FlagCacheBackend):
    """Dictionary-backed cache backend; expiry is recorded but not enforced."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.store[key] = value
        self.ttls[key] = ttl_seconds

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def keys(self, pattern: str) -> List[str]:
        return [key for key in self.store if fnmatch(key, pattern)]


@pytest.fixture
def memory_backend():
    """In-memory flag cache backend."""
    return InMemoryFlagCacheBackend()


@pytest.fixture
def organization_id():
    """Create a test organization ID."""
    return uuid4()


@pytest.fixture
def mock_db():
    """Mock async database session."""
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def test_logger():
    """Contextual logger for services under test."""
    return logger.with_context(component="test")


@pytest.fixture
def flag_factory():
    """Build FeatureFlag model instances without a database."""
    from dealerhub.models import FeatureFlag

    def _make(key="new_dashboard", **overrides):
        values = {
            "id": uuid4(),
            "key": key,
            "name": key.replace("_", " ").title(),
            "description": None,
            "default_enabled": False,
            "enabled_for_all": False,
            "percentage": None,
            "created_at": NOW,
            "modified_at": NOW,
        }
        values.update(overrides)
        return FeatureFlag(**values)

    return _make


@pytest.fixture
def override_factory():
    """Build OrganizationFeatureFlag model instances without a database."""
    from dealerhub.models import OrganizationFeatureFlag

    def _make(organization_id, feature_flag_id, enabled=True, flag_metadata=None):
        return OrganizationFeatureFlag(
            id=uuid4(),
            organization_id=organization_id,
            feature_flag_id=feature_flag_id,
            enabled=enabled,
            flag_metadata=flag_metadata,
            created_at=NOW,
            modified_at=NOW,
        )

    return _make


@pytest.fixture
def api_context_factory():
    """Build an ApiContext for a user with an optional active organization."""
    from dealerhub.api.context import ApiContext
    from dealerhub.core.shared_models import OrgRole, PlanType, UserRole
    from dealerhub.schemas import AuthContext, AuthOrganization, AuthUser, OrganizationMembership

    def _make(
        organization_id=None,
        org_role=OrgRole.MEMBER,
        user_role=UserRole.EMPLOYEE,
        user_id=None,
        extra_memberships=(),
        session_token="test-token",
    ):
        organization = None
        memberships = []
        if organization_id is not None:
            organization = AuthOrganization(
                id=organization_id,
                name="Test Dealership",
                slug="test-dealership",
                role=org_role,
                plan=PlanType.PROFESSIONAL,
            )
            memberships.append(
                OrganizationMembership(
                    id=organization_id,
                    name="Test Dealership",
                    slug="test-dealership",
                    role=org_role,
                    plan=PlanType.PROFESSIONAL,
                    is_primary=True,
                )
            )
        memberships.extend(extra_memberships)
        auth = AuthContext(
            user=AuthUser(
                id=user_id or uuid4(), email="dealer@example.com", name="Dealer", role=user_role
            ),
            organization=organization,
            organizations=memberships,
        )
        return ApiContext(
            request_id="test-request",
            auth=auth,
            session_token=session_token,
            logger=logger.with_context(request_id="test-request"),
        )

    return _make
