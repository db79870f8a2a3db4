"""Short-TTL cache in front of feature flag resolution.

One entry per organization holds the organization's full resolved flag map.
Entries are stamped with the organization's cache generation: invalidation
deletes the entry and rotates the generation, so a map computed from data read
before an invalidation is never served after it, even if it lands in the
cache late.

Reads degrade to direct resolution when the backend fails. Invalidation
failures propagate so that a write never reports success without it.
"""

import json
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.core.config import settings
from dealerhub.core.exceptions import UpstreamUnavailableException
from dealerhub.core.feature_flag_resolver import FeatureFlagResolver, feature_flag_resolver
from dealerhub.core.logging import ContextualLogger
from dealerhub.core.logging import logger as default_logger
from dealerhub.core.redis_client import redis_client


class FlagCacheBackend(ABC):
    """String key/value store with optional expiry."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored at key, or None."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value at key with an expiry."""

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""

    @abstractmethod
    async def keys(self, pattern: str) -> List[str]:
        """Return keys matching a glob-style pattern."""


class RedisFlagCacheBackend(FlagCacheBackend):
    """Backend on the shared Redis client."""

    async def get(self, key: str) -> Optional[str]:
        """Return the value stored at key, or None."""
        return await redis_client.client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value at key with an expiry."""
        await redis_client.client.setex(key, ttl_seconds, value)

    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        if not keys:
            return 0
        return await redis_client.client.delete(*keys)

    async def keys(self, pattern: str) -> List[str]:
        """Return keys matching a glob-style pattern (SCAN, non-blocking)."""
        return [key async for key in redis_client.client.scan_iter(match=pattern)]


class NullFlagCacheBackend(FlagCacheBackend):
    """Pass-through backend: every read misses, writes are dropped."""

    async def get(self, key: str) -> Optional[str]:
        """Always miss."""
        return None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Drop the value."""
        return None

    async def delete(self, *keys: str) -> int:
        """Nothing to delete."""
        return 0

    async def keys(self, pattern: str) -> List[str]:
        """No keys are ever stored."""
        return []


class FeatureFlagCache:
    """Organization-scoped cache of resolved feature flag maps."""

    KEY_PREFIX = "feature_flags:org"
    GENERATION_PREFIX = "feature_flags:gen"

    def __init__(
        self,
        backend: FlagCacheBackend,
        resolver: Optional[FeatureFlagResolver] = None,
        ttl_seconds: Optional[int] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the cache.

        Args:
            backend: Key/value backend holding the entries
            resolver: Resolver used on a miss
            ttl_seconds: Entry lifetime; defaults to FEATURE_FLAG_CACHE_TTL
            logger: Optional contextual logger for structured logging
        """
        self.backend = backend
        self.resolver = resolver or feature_flag_resolver
        self.ttl_seconds = ttl_seconds or settings.FEATURE_FLAG_CACHE_TTL
        self.logger = logger or default_logger.with_context(component="flag_cache")

    @property
    def generation_ttl(self) -> int:
        """Lifetime of a generation marker; outlives any entry stamped with it."""
        return self.ttl_seconds * 4

    def _cache_key(self, organization_id: UUID) -> str:
        return f"{self.KEY_PREFIX}:{organization_id}"

    def _generation_key(self, organization_id: UUID) -> str:
        return f"{self.GENERATION_PREFIX}:{organization_id}"

    async def _read_entry(self, organization_id: UUID) -> Optional[Dict[str, bool]]:
        raw = await self.backend.get(self._cache_key(organization_id))
        if not raw:
            return None

        entry = json.loads(raw)
        generation = await self.backend.get(self._generation_key(organization_id))
        if entry.get("generation") != generation:
            self.logger.debug(f"Cache STALE: feature flags for org {organization_id}")
            return None

        flags = entry["flags"]
        if not isinstance(flags, dict):
            raise ValueError("Cached feature flag map is not an object")
        return {str(key): bool(value) for key, value in flags.items()}

    async def get_flags(self, db: AsyncSession, organization_id: UUID) -> Dict[str, bool]:
        """Return the organization's resolved flag map.

        Serves a live cache entry when present; otherwise resolves every flag
        from the store and caches the result.

        Args:
            db: Database session used on a miss
            organization_id: Organization UUID

        Returns:
            Map of flag key to effective value
        """
        generation: Optional[str] = None
        try:
            cached = await self._read_entry(organization_id)
            if cached is not None:
                self.logger.debug(f"Cache HIT: feature flags for org {organization_id}")
                return cached
            self.logger.debug(f"Cache MISS: feature flags for org {organization_id}")
            generation = await self.backend.get(self._generation_key(organization_id))
        except Exception as e:
            # Log error but don't fail - resolve directly from the store
            self.logger.error(
                f"Error reading feature flags from cache: {e}. Falling back to store."
            )
            return await self.resolver.resolve_all(db, organization_id)

        try:
            flags = await self.resolver.load_flag_map(db, organization_id)
        except UpstreamUnavailableException as e:
            self.logger.error(f"Feature flag store unavailable for org {organization_id}: {e}")
            return {}

        try:
            payload = json.dumps({"generation": generation, "flags": flags})
            await self.backend.set(self._cache_key(organization_id), payload, self.ttl_seconds)
            self.logger.debug(
                f"Cached feature flags for org {organization_id} for {self.ttl_seconds}s"
            )
        except Exception as e:
            self.logger.warning(f"Error caching feature flags: {e}. Request will continue.")

        return flags

    async def get_or_resolve(
        self, db: AsyncSession, organization_id: UUID, flag_key: str
    ) -> bool:
        """Return one flag's effective value; unknown keys are False."""
        flags = await self.get_flags(db, organization_id)
        return flags.get(flag_key, False)

    async def get_many(
        self, db: AsyncSession, organization_id: UUID, flag_keys: Iterable[str]
    ) -> Dict[str, bool]:
        """Return effective values for the given keys; unknown keys are False."""
        flags = await self.get_flags(db, organization_id)
        return {key: flags.get(key, False) for key in flag_keys}

    async def invalidate(self, organization_id: UUID) -> None:
        """Evict the organization's entry regardless of its remaining TTL.

        Raises:
            UpstreamUnavailableException: If the backend cannot be reached
        """
        await self.invalidate_many([organization_id])

    async def invalidate_many(self, organization_ids: Iterable[UUID]) -> int:
        """Evict the entries of several organizations.

        Also sweeps any entry left for organizations not in the list, so a
        global change never leaves a stale map behind.

        Returns:
            Number of organizations invalidated

        Raises:
            UpstreamUnavailableException: If the backend cannot be reached
        """
        org_ids = list(organization_ids)
        try:
            for org_id in org_ids:
                await self.backend.set(
                    self._generation_key(org_id), uuid.uuid4().hex, self.generation_ttl
                )
            keys = {self._cache_key(org_id) for org_id in org_ids}
            if len(org_ids) > 1:
                keys.update(await self.backend.keys(f"{self.KEY_PREFIX}:*"))
            await self.backend.delete(*sorted(keys))
        except Exception as e:
            raise UpstreamUnavailableException(
                f"Could not invalidate feature flag cache: {e}", backend="cache"
            ) from e

        self.logger.debug(f"Invalidated feature flag cache for {len(org_ids)} organization(s)")
        return len(org_ids)


def build_flag_cache() -> FeatureFlagCache:
    """Create the process-wide cache from settings."""
    backend: FlagCacheBackend = (
        RedisFlagCacheBackend() if settings.FEATURE_FLAG_CACHE_ENABLED else NullFlagCacheBackend()
    )
    return FeatureFlagCache(backend=backend)


flag_cache = build_flag_cache()
