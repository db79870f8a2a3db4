"""Organization-level feature flag overrides."""

from typing import List
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import schemas
from dealerhub.api import deps
from dealerhub.api.context import ApiContext
from dealerhub.api.router import TrailingSlashRouter
from dealerhub.core.feature_flag_service import feature_flag_service
from dealerhub.core.shared_models import OrgRole

router = TrailingSlashRouter()

require_flag_manager = deps.require_org_role(OrgRole.OWNER, OrgRole.ADMIN)


@router.get(
    "/{organization_id}/feature-flags", response_model=List[schemas.FeatureFlagWithOverride]
)
async def list_organization_feature_flags(
    *,
    db: AsyncSession = Depends(deps.get_db),
    organization_id: UUID,
    ctx: ApiContext = Depends(require_flag_manager),
) -> List[schemas.FeatureFlagWithOverride]:
    """List every flag with the organization's override, ordered by name."""
    deps.ensure_active_organization(ctx, organization_id)
    return await feature_flag_service.list_for_organization(db, organization_id)


@router.post(
    "/{organization_id}/feature-flags", response_model=schemas.OrganizationFeatureFlag
)
async def set_organization_feature_flag(
    *,
    db: AsyncSession = Depends(deps.get_db),
    organization_id: UUID,
    override_in: schemas.OrganizationFeatureFlagUpsert,
    ctx: ApiContext = Depends(require_flag_manager),
) -> schemas.OrganizationFeatureFlag:
    """Create or replace the organization's override of a flag.

    Args:
        db: The database session
        organization_id: Organization to override the flag for
        override_in: Flag key, value and optional metadata
        ctx: The API context

    Returns:
        The stored override

    Raises:
        InsufficientPermissionsException: If the organization is not the active one
        NotFoundException: If no flag has the given key
    """
    deps.ensure_active_organization(ctx, organization_id)
    return await feature_flag_service.set_organization_override(
        db, organization_id, override_in, ctx
    )
