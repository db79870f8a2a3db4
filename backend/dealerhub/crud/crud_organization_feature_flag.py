"""CRUD operations for organization feature flag overrides."""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.core.exceptions import UpstreamUnavailableException
from dealerhub.crud._base import CRUDBase
from dealerhub.models.feature_flag import OrganizationFeatureFlag
from dealerhub.schemas.feature_flag import OrganizationFeatureFlagUpsert


class CRUDOrganizationFeatureFlag(
    CRUDBase[OrganizationFeatureFlag, OrganizationFeatureFlagUpsert, OrganizationFeatureFlagUpsert]
):
    """CRUD operations for organization feature flag overrides."""

    async def get_override(
        self, db: AsyncSession, organization_id: UUID, feature_flag_id: UUID
    ) -> Optional[OrganizationFeatureFlag]:
        """Get the override for an (organization, flag) pair."""
        result = await db.execute(
            select(OrganizationFeatureFlag).where(
                OrganizationFeatureFlag.organization_id == organization_id,
                OrganizationFeatureFlag.feature_flag_id == feature_flag_id,
            )
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        *,
        organization_id: UUID,
        feature_flag_id: UUID,
        enabled: bool,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> OrganizationFeatureFlag:
        """Create or replace the override for an (organization, flag) pair.

        A second write for the same pair replaces `enabled` and `metadata`; the
        unique constraint guarantees a single row per pair.
        """
        existing = await self.get_override(db, organization_id, feature_flag_id)
        if existing:
            return await self.update(
                db, db_obj=existing, obj_in={"enabled": enabled, "flag_metadata": metadata}
            )

        try:
            async with db.begin_nested():
                db_obj = OrganizationFeatureFlag(
                    organization_id=organization_id,
                    feature_flag_id=feature_flag_id,
                    enabled=enabled,
                    flag_metadata=metadata,
                )
                db.add(db_obj)
        except IntegrityError:
            # Another writer inserted the pair first; fall back to replacing it
            existing = await self.get_override(db, organization_id, feature_flag_id)
            if existing is None:
                # The competing row was removed before it could be read
                raise UpstreamUnavailableException(
                    "Override changed concurrently, please retry"
                )
            return await self.update(
                db, db_obj=existing, obj_in={"enabled": enabled, "flag_metadata": metadata}
            )

        await db.refresh(db_obj)
        return db_obj


organization_feature_flag = CRUDOrganizationFeatureFlag(OrganizationFeatureFlag)
