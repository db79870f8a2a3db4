"""Organization membership and lifecycle endpoints."""

from uuid import UUID

from fastapi import Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import schemas
from dealerhub.api import deps
from dealerhub.api.context import ApiContext
from dealerhub.api.router import TrailingSlashRouter
from dealerhub.core.organization_service import organization_service
from dealerhub.core.shared_models import OrgRole

router = TrailingSlashRouter()

require_member_manager = deps.require_org_role(OrgRole.OWNER, OrgRole.ADMIN)


@router.patch("/{organization_id}/members/{user_id}", response_model=schemas.Member)
async def update_member_role(
    *,
    db: AsyncSession = Depends(deps.get_db),
    organization_id: UUID,
    user_id: UUID,
    role_in: schemas.MemberRoleUpdate,
    ctx: ApiContext = Depends(require_member_manager),
) -> schemas.Member:
    """Change a member's role in the active organization.

    Args:
        db: The database session
        organization_id: The active organization
        user_id: The member to update
        role_in: The new role
        ctx: The API context

    Returns:
        The updated membership

    Raises:
        NotFoundException: If the user is not a member
        InsufficientPermissionsException: If the change involves the OWNER role
    """
    deps.ensure_active_organization(ctx, organization_id)
    return await organization_service.update_member_role(
        db, organization_id, user_id, role_in.role, ctx
    )


@router.delete(
    "/{organization_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def remove_member(
    *,
    db: AsyncSession = Depends(deps.get_db),
    organization_id: UUID,
    user_id: UUID,
    ctx: ApiContext = Depends(deps.require_organization),
) -> Response:
    """Remove a member from the active organization, or leave it.

    Members without OWNER or ADMIN may only remove themselves.
    """
    deps.ensure_active_organization(ctx, organization_id)
    await organization_service.remove_member(db, organization_id, user_id, ctx)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization(
    *,
    db: AsyncSession = Depends(deps.get_db),
    organization_id: UUID,
    ctx: ApiContext = Depends(deps.require_authenticated),
) -> Response:
    """Delete an organization the caller owns.

    Raises:
        InsufficientPermissionsException: If the caller is not an owner
        InvalidStateError: While the subscription is active
    """
    await organization_service.delete_organization(db, organization_id, ctx)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
