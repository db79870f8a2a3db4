"""Feature flag resolution.

Computes the effective boolean of a flag for an organization. Rules are
evaluated in this order, first match wins:

1. Unknown flag key -> False
2. `enabled_for_all` -> True
3. Organization override row -> its `enabled` value
4. `percentage` set -> rollout_bucket(organization_id, key) < percentage
5. Otherwise -> `default_enabled`

Rollout bucketing hashes the string ``f"{organization_id}:{flag_key}"`` with
SHA-256, reads the first 8 bytes of the digest as a big-endian unsigned
integer and reduces it modulo 100. Changing this function re-buckets every
organization for every partially rolled-out flag.
"""

import hashlib
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import crud
from dealerhub.core.exceptions import UpstreamUnavailableException
from dealerhub.core.logging import ContextualLogger
from dealerhub.core.logging import logger as default_logger

ROLLOUT_BUCKETS = 100


def rollout_bucket(organization_id: Any, flag_key: str) -> int:
    """Return the rollout bucket in [0, 100) of an organization for a flag.

    Pure function of its two inputs.
    """
    digest = hashlib.sha256(f"{organization_id}:{flag_key}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % ROLLOUT_BUCKETS


def evaluate_flag(flag: Optional[Any], override: Optional[Any], organization_id: Any) -> bool:
    """Evaluate a flag definition and optional override for one organization.

    Args:
        flag: Flag definition (model or schema), None when the key is unknown
        override: Organization override row, None when absent
        organization_id: Organization the flag is evaluated for

    Returns:
        Effective value of the flag
    """
    if flag is None:
        return False
    if flag.enabled_for_all:
        return True
    if override is not None:
        return bool(override.enabled)
    if flag.percentage is not None:
        return rollout_bucket(organization_id, flag.key) < flag.percentage
    return bool(flag.default_enabled)


class FeatureFlagResolver:
    """Resolves effective flag values from the store."""

    def __init__(self, logger: Optional[ContextualLogger] = None):
        """Initialize the resolver.

        Args:
            logger: Optional contextual logger for structured logging
        """
        self.logger = logger or default_logger.with_context(component="feature_flag_resolver")

    async def load_flag_map(
        self,
        db: AsyncSession,
        organization_id: UUID,
        keys: Optional[Iterable[str]] = None,
    ) -> Dict[str, bool]:
        """Resolve flags for an organization straight from the store.

        Args:
            db: Database session
            organization_id: Organization to resolve for
            keys: Restrict to these keys; every stored flag when None

        Returns:
            Map of flag key to effective value for the stored flags

        Raises:
            UpstreamUnavailableException: If the store cannot be read
        """
        try:
            rows = await crud.feature_flag.get_with_overrides(
                db, organization_id, keys=list(keys) if keys is not None else None
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableException(
                f"Could not read feature flags: {e}", backend="database"
            ) from e

        return {flag.key: evaluate_flag(flag, override, organization_id) for flag, override in rows}

    async def resolve(self, db: AsyncSession, organization_id: UUID, flag_key: str) -> bool:
        """Resolve a single flag; unknown or unreadable flags are False."""
        resolved = await self.resolve_many(db, organization_id, [flag_key])
        return resolved[flag_key]

    async def resolve_many(
        self, db: AsyncSession, organization_id: UUID, flag_keys: Iterable[str]
    ) -> Dict[str, bool]:
        """Resolve several flags with the same per-flag rules as `resolve`."""
        keys: List[str] = list(dict.fromkeys(flag_keys))
        try:
            flag_map = await self.load_flag_map(db, organization_id, keys=keys)
        except UpstreamUnavailableException as e:
            self.logger.error(
                f"Feature flag resolution failed for org {organization_id}: {e}. "
                "Treating flags as disabled."
            )
            flag_map = {}
        return {key: flag_map.get(key, False) for key in keys}

    async def resolve_all(self, db: AsyncSession, organization_id: UUID) -> Dict[str, bool]:
        """Resolve every stored flag; empty when the store is unreadable."""
        try:
            return await self.load_flag_map(db, organization_id)
        except UpstreamUnavailableException as e:
            self.logger.error(f"Feature flag resolution failed for org {organization_id}: {e}")
            return {}


feature_flag_resolver = FeatureFlagResolver()
