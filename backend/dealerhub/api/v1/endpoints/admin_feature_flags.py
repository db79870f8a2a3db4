"""Platform admin endpoints for feature flag definitions."""

from typing import List
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import schemas
from dealerhub.api import deps
from dealerhub.api.context import ApiContext
from dealerhub.api.router import TrailingSlashRouter
from dealerhub.core.feature_flag_service import feature_flag_service

router = TrailingSlashRouter()


@router.get("", response_model=List[schemas.FeatureFlagWithCount])
async def list_feature_flags(
    *,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.require_platform_admin),
) -> List[schemas.FeatureFlagWithCount]:
    """List every flag definition with its override count, newest first."""
    return await feature_flag_service.list_definitions(db)


@router.post("", response_model=schemas.FeatureFlag)
async def create_feature_flag(
    *,
    db: AsyncSession = Depends(deps.get_db),
    flag_in: schemas.FeatureFlagCreate,
    ctx: ApiContext = Depends(deps.require_platform_admin),
) -> schemas.FeatureFlag:
    """Create a flag definition.

    Args:
        db: The database session
        flag_in: The flag definition
        ctx: The API context

    Returns:
        The created flag

    Raises:
        DuplicateKeyException: If a flag with the key already exists
    """
    return await feature_flag_service.create_flag(db, flag_in, ctx)


@router.patch("/{flag_id}", response_model=schemas.FeatureFlag)
async def update_feature_flag(
    *,
    db: AsyncSession = Depends(deps.get_db),
    flag_id: UUID,
    flag_in: schemas.FeatureFlagUpdate,
    ctx: ApiContext = Depends(deps.require_platform_admin),
) -> schemas.FeatureFlag:
    """Update mutable fields of a flag definition.

    The key cannot be changed. Setting `percentage` to null turns the
    rollout off.

    Raises:
        NotFoundException: If the flag does not exist
    """
    return await feature_flag_service.update_flag(db, flag_id, flag_in, ctx)
