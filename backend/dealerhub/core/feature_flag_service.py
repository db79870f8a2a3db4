"""Feature flag administration.

Every write follows the same sequence: commit to the store, invalidate the
affected cache entries, then record the audit entry. A write whose
invalidation fails raises instead of reporting success.
"""

from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import crud, schemas
from dealerhub.api.context import ApiContext
from dealerhub.core.audit_service import AuditService, audit_service
from dealerhub.core.exceptions import NotFoundException
from dealerhub.core.flag_cache_service import FeatureFlagCache, flag_cache
from dealerhub.core.shared_models import AuditAction, FeatureFlagKey


class FeatureFlagService:
    """Reads and writes flag definitions and organization overrides."""

    def __init__(
        self,
        cache: Optional[FeatureFlagCache] = None,
        audit: Optional[AuditService] = None,
    ):
        """Initialize the service.

        Args:
            cache: Flag cache invalidated on writes; defaults to the shared cache
            audit: Audit service; defaults to the shared service
        """
        self.cache = cache or flag_cache
        self.audit = audit or audit_service

    async def get_effective_flags(
        self, db: AsyncSession, organization_id: UUID
    ) -> Dict[str, bool]:
        """Effective values of every known flag for an organization.

        Catalog keys are always present so undefined flags read as False,
        the same as disabled ones.
        """
        flags = await self.cache.get_flags(db, organization_id)
        effective = {key.value: False for key in FeatureFlagKey}
        effective.update(flags)
        return effective

    async def list_definitions(self, db: AsyncSession) -> List[schemas.FeatureFlagWithCount]:
        """Every flag definition with its override count, newest first."""
        rows = await crud.feature_flag.get_all_with_override_counts(db)
        return [
            schemas.FeatureFlagWithCount(
                **schemas.FeatureFlag.model_validate(flag).model_dump(),
                organization_override_count=count,
            )
            for flag, count in rows
        ]

    async def list_for_organization(
        self, db: AsyncSession, organization_id: UUID
    ) -> List[schemas.FeatureFlagWithOverride]:
        """Every flag definition with one organization's override, by name."""
        rows = await crud.feature_flag.get_with_overrides(db, organization_id)
        return [
            schemas.FeatureFlagWithOverride(
                **schemas.FeatureFlag.model_validate(flag).model_dump(),
                organization_override=(
                    schemas.OrganizationFeatureFlag.model_validate(override)
                    if override is not None
                    else None
                ),
            )
            for flag, override in rows
        ]

    async def create_flag(
        self, db: AsyncSession, obj_in: schemas.FeatureFlagCreate, ctx: ApiContext
    ) -> schemas.FeatureFlag:
        """Create a flag definition.

        Raises:
            DuplicateKeyException: If the key already exists
        """
        flag = await crud.feature_flag.create(db, obj_in=obj_in)
        await db.commit()
        await db.refresh(flag)
        result = schemas.FeatureFlag.model_validate(flag)

        await self._invalidate_all_organizations(db)

        ctx.logger.info(f"Feature flag created: {result.key} ({result.id})")
        await self.audit.record(
            db,
            action=AuditAction.FEATURE_FLAG_CREATED.value,
            resource=result.key,
            metadata=obj_in.model_dump(),
            actor_id=ctx.user.id,
            organization_id=None,
            request_meta=ctx.request_meta,
        )
        return result

    async def update_flag(
        self,
        db: AsyncSession,
        flag_id: UUID,
        obj_in: schemas.FeatureFlagUpdate,
        ctx: ApiContext,
    ) -> schemas.FeatureFlag:
        """Update mutable fields of a flag definition.

        Existing organization overrides are left untouched.

        Raises:
            NotFoundException: If the flag does not exist
        """
        flag = await crud.feature_flag.get(db, id=flag_id)
        if flag is None:
            raise NotFoundException(f"Feature flag {flag_id} not found")

        changes = obj_in.model_dump(exclude_unset=True)
        flag = await crud.feature_flag.update(db, db_obj=flag, obj_in=changes)
        await db.commit()
        await db.refresh(flag)
        result = schemas.FeatureFlag.model_validate(flag)

        await self._invalidate_all_organizations(db)

        ctx.logger.info(f"Feature flag updated: {result.key} ({result.id})")
        await self.audit.record(
            db,
            action=AuditAction.FEATURE_FLAG_UPDATED.value,
            resource=result.key,
            metadata=changes,
            actor_id=ctx.user.id,
            organization_id=None,
            request_meta=ctx.request_meta,
        )
        return result

    async def set_organization_override(
        self,
        db: AsyncSession,
        organization_id: UUID,
        obj_in: schemas.OrganizationFeatureFlagUpsert,
        ctx: ApiContext,
    ) -> schemas.OrganizationFeatureFlag:
        """Create or replace an organization's override of a flag.

        Raises:
            NotFoundException: If no flag has the given key
        """
        flag = await crud.feature_flag.get_by_key(db, obj_in.feature_flag_key)
        if flag is None:
            raise NotFoundException(f"Feature flag '{obj_in.feature_flag_key}' not found")
        flag_key = flag.key

        previous = await crud.organization_feature_flag.get_override(
            db, organization_id=organization_id, feature_flag_id=flag.id
        )
        previous_enabled = previous.enabled if previous is not None else None

        override = await crud.organization_feature_flag.upsert(
            db,
            organization_id=organization_id,
            feature_flag_id=flag.id,
            enabled=obj_in.enabled,
            metadata=obj_in.metadata,
        )
        await db.commit()
        await db.refresh(override)
        result = schemas.OrganizationFeatureFlag.model_validate(override)

        await self.cache.invalidate(organization_id)

        ctx.logger.info(
            f"Organization feature flag updated: {flag_key} enabled={obj_in.enabled} "
            f"for org {organization_id}"
        )
        await self.audit.record(
            db,
            action=AuditAction.ORGANIZATION_FLAG_UPDATED.value,
            resource=flag_key,
            metadata={"enabled": obj_in.enabled, "previous_enabled": previous_enabled},
            actor_id=ctx.user.id,
            organization_id=organization_id,
            request_meta=ctx.request_meta,
        )
        return result

    async def _invalidate_all_organizations(self, db: AsyncSession) -> None:
        organization_ids = await crud.organization.get_all_ids(db)
        await self.cache.invalidate_many(organization_ids)


feature_flag_service = FeatureFlagService()
