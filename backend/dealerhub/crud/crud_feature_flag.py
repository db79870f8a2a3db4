"""CRUD operations for feature flag definitions."""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.core.exceptions import DuplicateKeyException
from dealerhub.crud._base import CRUDBase
from dealerhub.models.feature_flag import FeatureFlag, OrganizationFeatureFlag
from dealerhub.schemas.feature_flag import FeatureFlagCreate, FeatureFlagUpdate


class CRUDFeatureFlag(CRUDBase[FeatureFlag, FeatureFlagCreate, FeatureFlagUpdate]):
    """CRUD operations for feature flag definitions."""

    async def get_by_key(self, db: AsyncSession, key: str) -> Optional[FeatureFlag]:
        """Get a flag definition by its key."""
        result = await db.execute(select(FeatureFlag).where(FeatureFlag.key == key))
        return result.scalar_one_or_none()

    async def get_all_with_override_counts(
        self, db: AsyncSession
    ) -> List[Tuple[FeatureFlag, int]]:
        """Get every flag with the number of organization overrides, newest first."""
        override_count = (
            select(
                OrganizationFeatureFlag.feature_flag_id,
                func.count(OrganizationFeatureFlag.id).label("override_count"),
            )
            .group_by(OrganizationFeatureFlag.feature_flag_id)
            .subquery()
        )
        stmt = (
            select(FeatureFlag, func.coalesce(override_count.c.override_count, 0))
            .outerjoin(override_count, override_count.c.feature_flag_id == FeatureFlag.id)
            .order_by(FeatureFlag.created_at.desc())
        )
        result = await db.execute(stmt)
        return [(flag, int(count)) for flag, count in result.all()]

    async def get_with_overrides(
        self,
        db: AsyncSession,
        organization_id: UUID,
        keys: Optional[Sequence[str]] = None,
    ) -> List[Tuple[FeatureFlag, Optional[OrganizationFeatureFlag]]]:
        """Get flags joined with one organization's override row.

        Args:
            db: Database session
            organization_id: Organization whose overrides are joined
            keys: Restrict to these keys; all flags when None

        Returns:
            List of (flag, override or None), ordered by flag name
        """
        stmt = (
            select(FeatureFlag, OrganizationFeatureFlag)
            .outerjoin(
                OrganizationFeatureFlag,
                and_(
                    OrganizationFeatureFlag.feature_flag_id == FeatureFlag.id,
                    OrganizationFeatureFlag.organization_id == organization_id,
                ),
            )
            .order_by(FeatureFlag.name)
        )
        if keys is not None:
            stmt = stmt.where(FeatureFlag.key.in_(list(keys)))
        result = await db.execute(stmt)
        return [(flag, override) for flag, override in result.all()]

    async def create(
        self, db: AsyncSession, *, obj_in: Union[FeatureFlagCreate, Dict[str, Any]]
    ) -> FeatureFlag:
        """Create a flag definition.

        Raises:
            DuplicateKeyException: If a flag with the same key exists
        """
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        key = data["key"]
        if await self.get_by_key(db, key):
            raise DuplicateKeyException(f"Feature flag with key '{key}' already exists")
        try:
            return await super().create(db, obj_in=data)
        except IntegrityError as e:
            # Concurrent create won the unique constraint
            await db.rollback()
            raise DuplicateKeyException(f"Feature flag with key '{key}' already exists") from e


feature_flag = CRUDFeatureFlag(FeatureFlag)
