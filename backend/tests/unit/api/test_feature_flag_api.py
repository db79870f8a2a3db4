"""API tests for the feature flag endpoints."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from dealerhub import schemas
from dealerhub.core.exceptions import (
    DuplicateKeyException,
    NotFoundException,
    UpstreamUnavailableException,
)
from dealerhub.core.shared_models import OrgRole, UserRole

NOW = "2026-01-01T00:00:00Z"


@pytest.fixture
def mock_service():
    """Patch the feature flag service used by every flag endpoint."""
    targets = [
        "dealerhub.api.v1.endpoints.feature_flags.feature_flag_service",
        "dealerhub.api.v1.endpoints.admin_feature_flags.feature_flag_service",
        "dealerhub.api.v1.endpoints.organization_feature_flags.feature_flag_service",
    ]
    service = AsyncMock()
    patchers = [patch(target, service) for target in targets]
    for patcher in patchers:
        patcher.start()
    yield service
    for patcher in patchers:
        patcher.stop()


def _flag(key="api_v2", **values):
    return schemas.FeatureFlag(
        id=uuid4(), key=key, name=key, created_at=NOW, modified_at=NOW, **values
    )


def _override(organization_id, enabled=True):
    return schemas.OrganizationFeatureFlag(
        id=uuid4(),
        organization_id=organization_id,
        feature_flag_id=uuid4(),
        enabled=enabled,
        metadata=None,
        created_at=NOW,
        modified_at=NOW,
    )


# ============================================================================
# GET /feature-flags
# ============================================================================


@pytest.mark.asyncio
async def test_read_flags_requires_authentication(client, mock_service):
    """Anonymous callers get 401."""
    response = await client.get("/api/v1/feature-flags")

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthenticated"
    mock_service.get_effective_flags.assert_not_awaited()


@pytest.mark.asyncio
async def test_read_flags_requires_organization(
    client, auth_state, api_context_factory, mock_service
):
    """Users without an active organization get 403."""
    auth_state.ctx = api_context_factory(organization_id=None)

    response = await client.get("/api/v1/feature-flags")

    assert response.status_code == 403
    assert response.json() == {"error": "OrganizationRequired", "detail": "Organization required"}


@pytest.mark.asyncio
async def test_read_flags_for_active_organization(
    client, auth_state, api_context_factory, mock_service, api_db, organization_id
):
    """Flags are resolved for the active organization."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.VIEWER)
    mock_service.get_effective_flags.return_value = {"api_v2": True, "new_dashboard": False}

    response = await client.get("/api/v1/feature-flags")

    assert response.status_code == 200
    assert response.json() == {"api_v2": True, "new_dashboard": False}
    mock_service.get_effective_flags.assert_awaited_once_with(api_db, organization_id)


@pytest.mark.asyncio
async def test_read_flags_trailing_slash(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """The trailing-slash spelling is served without a redirect."""
    auth_state.ctx = api_context_factory(organization_id)
    mock_service.get_effective_flags.return_value = {}

    response = await client.get("/api/v1/feature-flags/")

    assert response.status_code == 200


# ============================================================================
# Admin definitions
# ============================================================================


@pytest.mark.asyncio
async def test_admin_endpoints_require_platform_admin(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Organization owners without a platform role cannot manage definitions."""
    auth_state.ctx = api_context_factory(
        organization_id, org_role=OrgRole.OWNER, user_role=UserRole.MANAGER
    )

    response = await client.get("/api/v1/admin/feature-flags")

    assert response.status_code == 403
    assert response.json()["error"] == "InsufficientPermissions"


@pytest.mark.asyncio
@pytest.mark.parametrize("user_role", [UserRole.ADMIN, UserRole.SUPERADMIN])
async def test_admin_list_definitions(
    client, auth_state, api_context_factory, mock_service, user_role
):
    """Platform admins list definitions with override counts."""
    auth_state.ctx = api_context_factory(user_role=user_role)
    mock_service.list_definitions.return_value = [
        schemas.FeatureFlagWithCount(
            **_flag("bulk_operations", percentage=50).model_dump(),
            organization_override_count=2,
        )
    ]

    response = await client.get("/api/v1/admin/feature-flags")

    assert response.status_code == 200
    body = response.json()
    assert body[0]["key"] == "bulk_operations"
    assert body[0]["percentage"] == 50
    assert body[0]["organization_override_count"] == 2


@pytest.mark.asyncio
async def test_admin_create_flag(client, auth_state, api_context_factory, mock_service):
    """Creating a flag accepts camelCase fields and returns it with 200."""
    auth_state.ctx = api_context_factory(user_role=UserRole.SUPERADMIN)
    mock_service.create_flag.return_value = _flag("custom_reports", default_enabled=True)

    response = await client.post(
        "/api/v1/admin/feature-flags",
        json={"key": "custom_reports", "name": "Custom Reports", "defaultEnabled": True},
    )

    assert response.status_code == 200
    flag_in = mock_service.create_flag.call_args.args[1]
    assert flag_in.default_enabled is True
    assert flag_in.enabled_for_all is False


@pytest.mark.asyncio
async def test_admin_create_flag_trailing_slash(
    client, auth_state, api_context_factory, mock_service
):
    """Posting to the collection with a trailing slash creates without a redirect."""
    auth_state.ctx = api_context_factory(user_role=UserRole.ADMIN)
    mock_service.create_flag.return_value = _flag("custom_reports")

    response = await client.post(
        "/api/v1/admin/feature-flags/", json={"key": "custom_reports", "name": "Custom Reports"}
    )

    assert response.status_code == 200
    assert response.json()["key"] == "custom_reports"
    mock_service.create_flag.assert_awaited_once()


@pytest.mark.asyncio
async def test_admin_create_duplicate_flag(client, auth_state, api_context_factory, mock_service):
    """Duplicate keys are rejected with 400."""
    auth_state.ctx = api_context_factory(user_role=UserRole.ADMIN)
    mock_service.create_flag.side_effect = DuplicateKeyException(
        "Feature flag with key 'custom_reports' already exists"
    )

    response = await client.post(
        "/api/v1/admin/feature-flags", json={"key": "custom_reports", "name": "x"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "DuplicateKey"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"key": "Bad-Key", "name": "x"},
        {"key": "ok_key", "name": "x", "percentage": 101},
        {"key": "ok_key"},
    ],
)
async def test_admin_create_invalid_payload(
    client, auth_state, api_context_factory, mock_service, payload
):
    """Invalid definitions are rejected with a 400 validation error."""
    auth_state.ctx = api_context_factory(user_role=UserRole.ADMIN)

    response = await client.post("/api/v1/admin/feature-flags", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    mock_service.create_flag.assert_not_awaited()


@pytest.mark.asyncio
async def test_admin_update_flag(client, auth_state, api_context_factory, mock_service):
    """Partial updates forward only the provided fields."""
    auth_state.ctx = api_context_factory(user_role=UserRole.ADMIN)
    flag_id = uuid4()
    mock_service.update_flag.return_value = _flag("api_v2", enabled_for_all=True)

    response = await client.patch(
        f"/api/v1/admin/feature-flags/{flag_id}", json={"enabledForAll": True, "percentage": None}
    )

    assert response.status_code == 200
    _, called_id, flag_in, _ = mock_service.update_flag.call_args.args
    assert called_id == flag_id
    assert flag_in.model_dump(exclude_unset=True) == {"enabled_for_all": True, "percentage": None}


@pytest.mark.asyncio
async def test_admin_update_cannot_change_key(
    client, auth_state, api_context_factory, mock_service
):
    """The key is immutable."""
    auth_state.ctx = api_context_factory(user_role=UserRole.ADMIN)

    response = await client.patch(f"/api/v1/admin/feature-flags/{uuid4()}", json={"key": "other"})

    assert response.status_code == 400
    mock_service.update_flag.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"name": None},
        {"defaultEnabled": None},
        {"enabledForAll": None},
        {"name": None, "defaultEnabled": None, "enabledForAll": None},
    ],
)
async def test_admin_update_rejects_null_required_fields(
    client, auth_state, api_context_factory, mock_service, payload
):
    """Only the rollout percentage can be cleared; other nulls are validation errors."""
    auth_state.ctx = api_context_factory(user_role=UserRole.ADMIN)

    response = await client.patch(f"/api/v1/admin/feature-flags/{uuid4()}", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    mock_service.update_flag.assert_not_awaited()


@pytest.mark.asyncio
async def test_admin_update_unknown_flag(client, auth_state, api_context_factory, mock_service):
    """Unknown flag ids are 404."""
    auth_state.ctx = api_context_factory(user_role=UserRole.ADMIN)
    mock_service.update_flag.side_effect = NotFoundException("Feature flag not found")

    response = await client.patch(f"/api/v1/admin/feature-flags/{uuid4()}", json={"name": "x"})

    assert response.status_code == 404
    assert response.json() == {"error": "NotFound", "detail": "Feature flag not found"}


# ============================================================================
# Organization overrides
# ============================================================================


@pytest.mark.asyncio
async def test_member_cannot_manage_overrides(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """MEMBER is outside the allowed roles."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.MEMBER)

    response = await client.get(f"/api/v1/organizations/{organization_id}/feature-flags")

    assert response.status_code == 403
    assert response.json()["error"] == "InsufficientPermissions"


@pytest.mark.asyncio
async def test_role_change_applies_on_next_request(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """The context is rebuilt per request, so a promotion takes effect immediately."""
    user_id = uuid4()
    mock_service.list_for_organization.return_value = []

    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.MEMBER, user_id=user_id)
    denied = await client.get(f"/api/v1/organizations/{organization_id}/feature-flags")

    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.ADMIN, user_id=user_id)
    allowed = await client.get(f"/api/v1/organizations/{organization_id}/feature-flags")

    assert denied.status_code == 403
    assert allowed.status_code == 200


@pytest.mark.asyncio
async def test_overrides_for_other_organization_forbidden(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Owners cannot reach another organization through the path."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.OWNER)

    response = await client.post(
        f"/api/v1/organizations/{uuid4()}/feature-flags",
        json={"featureFlagKey": "api_v2", "enabled": True},
    )

    assert response.status_code == 403
    mock_service.set_organization_override.assert_not_awaited()


@pytest.mark.asyncio
async def test_set_override(
    client, auth_state, api_context_factory, mock_service, api_db, organization_id
):
    """Owners set overrides; camelCase and snake_case bodies are accepted."""
    ctx = api_context_factory(organization_id, org_role=OrgRole.OWNER)
    auth_state.ctx = ctx
    mock_service.set_organization_override.return_value = _override(organization_id)

    camel = await client.post(
        f"/api/v1/organizations/{organization_id}/feature-flags",
        json={"featureFlagKey": "api_v2", "enabled": True, "metadata": {"reason": "pilot"}},
    )
    snake = await client.post(
        f"/api/v1/organizations/{organization_id}/feature-flags",
        json={"feature_flag_key": "api_v2", "enabled": False},
    )

    assert camel.status_code == 200
    assert snake.status_code == 200
    assert camel.json()["organization_id"] == str(organization_id)
    first, second = mock_service.set_organization_override.call_args_list
    assert first.args[2].feature_flag_key == "api_v2"
    assert first.args[2].metadata == {"reason": "pilot"}
    assert second.args[2].enabled is False


@pytest.mark.asyncio
async def test_set_override_unknown_key(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Unknown keys are 404."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.ADMIN)
    mock_service.set_organization_override.side_effect = NotFoundException("Feature flag not found")

    response = await client.post(
        f"/api/v1/organizations/{organization_id}/feature-flags",
        json={"featureFlagKey": "nope", "enabled": True},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_set_override_cache_unavailable(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """A write whose invalidation failed is reported as 503."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.ADMIN)
    mock_service.set_organization_override.side_effect = UpstreamUnavailableException(
        "Could not invalidate feature flag cache", backend="cache"
    )

    response = await client.post(
        f"/api/v1/organizations/{organization_id}/feature-flags",
        json={"featureFlagKey": "api_v2", "enabled": True},
    )

    assert response.status_code == 503
    assert response.json()["error"] == "UpstreamUnavailable"
