"""Redis-backed session storage.

Sessions map an opaque token to the user and the organization recorded as
current. Tokens are issued by the login flow through `create`.
"""

import secrets
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from dealerhub.core.config import settings
from dealerhub.core.exceptions import UpstreamUnavailableException
from dealerhub.core.logging import ContextualLogger
from dealerhub.core.logging import logger as default_logger
from dealerhub.core.redis_client import redis_client
from dealerhub.schemas.auth import SessionData


class SessionStore:
    """Session storage on the shared Redis client."""

    KEY_PREFIX = "session"

    def __init__(
        self, ttl_seconds: Optional[int] = None, logger: Optional[ContextualLogger] = None
    ):
        """Initialize the session store.

        Args:
            ttl_seconds: Session lifetime; defaults to SESSION_TTL
            logger: Optional contextual logger for structured logging
        """
        self.ttl_seconds = ttl_seconds or settings.SESSION_TTL
        self.logger = logger or default_logger.with_context(component="session_store")

    def _session_key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}:{token}"

    async def create(
        self, user_id: UUID, current_organization_id: Optional[UUID] = None
    ) -> str:
        """Create a session and return its token."""
        token = secrets.token_urlsafe(32)
        data = SessionData(
            user_id=user_id,
            current_organization_id=current_organization_id,
            created_at=datetime.now(timezone.utc),
        )
        await self._write(token, data)
        self.logger.debug(f"Created session for user {user_id}")
        return token

    async def get(self, token: str) -> Optional[SessionData]:
        """Load a session.

        Returns:
            Session data, or None for unknown, expired or corrupt sessions

        Raises:
            UpstreamUnavailableException: If Redis cannot be reached
        """
        try:
            raw = await redis_client.client.get(self._session_key(token))
        except Exception as e:
            raise UpstreamUnavailableException(
                f"Could not read session: {e}", backend="redis"
            ) from e

        if not raw:
            return None

        try:
            return SessionData.model_validate_json(raw)
        except ValidationError as e:
            self.logger.warning(f"Discarding corrupt session payload: {e}")
            return None

    async def set_current_organization(
        self, token: str, organization_id: Optional[UUID]
    ) -> Optional[SessionData]:
        """Persist a new current organization on an existing session."""
        data = await self.get(token)
        if data is None:
            return None
        data.current_organization_id = organization_id
        await self._write(token, data)
        return data

    async def touch(self, token: str) -> bool:
        """Extend a session's lifetime."""
        try:
            key = self._session_key(token)
            return bool(await redis_client.client.expire(key, self.ttl_seconds))
        except Exception as e:
            self.logger.warning(f"Error extending session: {e}")
            return False

    async def destroy(self, token: str) -> None:
        """Delete a session."""
        try:
            await redis_client.client.delete(self._session_key(token))
        except Exception as e:
            raise UpstreamUnavailableException(
                f"Could not delete session: {e}", backend="redis"
            ) from e

    async def _write(self, token: str, data: SessionData) -> None:
        try:
            await redis_client.client.setex(
                self._session_key(token), self.ttl_seconds, data.model_dump_json()
            )
        except Exception as e:
            raise UpstreamUnavailableException(
                f"Could not write session: {e}", backend="redis"
            ) from e


session_store = SessionStore()
