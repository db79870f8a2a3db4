"""Feature flag values for the caller's organization."""

from typing import Dict

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.api import deps
from dealerhub.api.context import ApiContext
from dealerhub.api.router import TrailingSlashRouter
from dealerhub.core.feature_flag_service import feature_flag_service

router = TrailingSlashRouter()


@router.get("", response_model=Dict[str, bool])
async def read_feature_flags(
    *,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.require_organization),
) -> Dict[str, bool]:
    """Effective flag values of the active organization.

    Every catalog key is present; flags that are undefined or cannot be
    resolved read as False.
    """
    return await feature_flag_service.get_effective_flags(db, ctx.organization.id)
