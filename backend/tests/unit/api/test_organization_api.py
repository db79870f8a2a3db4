"""API tests for organization membership and deletion endpoints."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from dealerhub import schemas
from dealerhub.core.exceptions import InsufficientPermissionsException, InvalidStateError
from dealerhub.core.shared_models import OrgRole


@pytest.fixture
def mock_service():
    """Patch the organization service."""
    with patch("dealerhub.api.v1.endpoints.organizations.organization_service") as mock:
        mock.update_member_role = AsyncMock()
        mock.remove_member = AsyncMock()
        mock.delete_organization = AsyncMock()
        yield mock


@pytest.mark.asyncio
async def test_update_member_role(
    client, auth_state, api_context_factory, mock_service, api_db, organization_id
):
    """Admins change member roles in their active organization."""
    ctx = api_context_factory(organization_id, org_role=OrgRole.ADMIN)
    auth_state.ctx = ctx
    member_id = uuid4()
    mock_service.update_member_role.return_value = schemas.Member(
        id=uuid4(),
        user_id=member_id,
        organization_id=organization_id,
        role=OrgRole.MEMBER,
        is_primary=False,
    )

    response = await client.patch(
        f"/api/v1/organizations/{organization_id}/members/{member_id}", json={"role": "MEMBER"}
    )

    assert response.status_code == 200
    assert response.json()["role"] == "MEMBER"
    mock_service.update_member_role.assert_awaited_once_with(
        api_db, organization_id, member_id, OrgRole.MEMBER, ctx
    )


@pytest.mark.asyncio
async def test_update_member_role_invalid_role(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Unknown roles fail validation."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.OWNER)

    response = await client.patch(
        f"/api/v1/organizations/{organization_id}/members/{uuid4()}", json={"role": "EMPEROR"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_viewer_cannot_update_roles(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Viewers are outside the role gate."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.VIEWER)

    response = await client.patch(
        f"/api/v1/organizations/{organization_id}/members/{uuid4()}", json={"role": "ADMIN"}
    )

    assert response.status_code == 403
    mock_service.update_member_role.assert_not_awaited()


@pytest.mark.asyncio
async def test_remove_member_in_other_organization(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Members can only be removed from the active organization."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.OWNER)

    response = await client.delete(f"/api/v1/organizations/{uuid4()}/members/{uuid4()}")

    assert response.status_code == 403
    mock_service.remove_member.assert_not_awaited()


@pytest.mark.asyncio
async def test_member_leaves_organization(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Self-removal passes the endpoint gate for any role."""
    user_id = uuid4()
    auth_state.ctx = api_context_factory(
        organization_id, org_role=OrgRole.VIEWER, user_id=user_id
    )

    response = await client.delete(f"/api/v1/organizations/{organization_id}/members/{user_id}")

    assert response.status_code == 204
    mock_service.remove_member.assert_awaited_once()


@pytest.mark.asyncio
async def test_remove_member_refused_by_service(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Service permission errors map to 403."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.MEMBER)
    mock_service.remove_member.side_effect = InsufficientPermissionsException()

    response = await client.delete(f"/api/v1/organizations/{organization_id}/members/{uuid4()}")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_organization(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """Owners delete organizations with 204."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.OWNER)

    response = await client.delete(f"/api/v1/organizations/{organization_id}")

    assert response.status_code == 204
    mock_service.delete_organization.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_organization_with_active_subscription(
    client, auth_state, api_context_factory, mock_service, organization_id
):
    """An active subscription is reported as 400 InvalidState."""
    auth_state.ctx = api_context_factory(organization_id, org_role=OrgRole.OWNER)
    mock_service.delete_organization.side_effect = InvalidStateError(
        "Please cancel your subscription before deleting the organization"
    )

    response = await client.delete(f"/api/v1/organizations/{organization_id}")

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidState"


@pytest.mark.asyncio
async def test_delete_organization_requires_authentication(client, mock_service):
    """Anonymous callers get 401."""
    response = await client.delete(f"/api/v1/organizations/{uuid4()}")
    assert response.status_code == 401
