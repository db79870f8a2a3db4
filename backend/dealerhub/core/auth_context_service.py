"""Authorization context resolution.

Builds the per-request AuthContext from the session and the caller's
memberships. The `X-Organization-ID` header may select another organization
for a single request, but only one the caller is a member of; any other value
is ignored and the session's organization stands. The session itself is never
changed here.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import crud
from dealerhub.core.logging import ContextualLogger
from dealerhub.core.logging import logger as default_logger
from dealerhub.core.session_store import SessionStore, session_store
from dealerhub.models.user import User
from dealerhub.schemas.auth import AuthContext, AuthOrganization, AuthUser, SessionData
from dealerhub.schemas.organization import OrganizationMembership


def memberships_for(user: User) -> List[OrganizationMembership]:
    """List a user's memberships, primary first, then oldest first."""
    user_orgs = sorted(
        (uo for uo in user.user_organizations if uo.organization is not None),
        key=lambda uo: (not uo.is_primary, uo.created_at),
    )
    return [
        OrganizationMembership(
            id=uo.organization.id,
            name=uo.organization.name,
            slug=uo.organization.slug,
            role=uo.role,
            plan=uo.organization.plan,
            is_primary=uo.is_primary,
        )
        for uo in user_orgs
    ]


def _parse_organization_id(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _find(
    memberships: List[OrganizationMembership], organization_id: Optional[UUID]
) -> Optional[OrganizationMembership]:
    if organization_id is None:
        return None
    return next((m for m in memberships if m.id == organization_id), None)


def resolve_auth_context(
    session: SessionData,
    user: User,
    requested_organization_id: Optional[str] = None,
) -> AuthContext:
    """Combine session, user and optional switch header into an AuthContext.

    Args:
        session: Session loaded for the request's token
        user: Session user with memberships loaded
        requested_organization_id: Raw value of the organization-switch header

    Returns:
        AuthContext whose organization is a membership of the user, or None
    """
    memberships = memberships_for(user)

    current = _find(memberships, session.current_organization_id)
    if current is None and memberships:
        current = memberships[0]

    requested = _find(memberships, _parse_organization_id(requested_organization_id))
    if requested is not None:
        current = requested

    organization = None
    if current is not None:
        organization = AuthOrganization(
            id=current.id,
            name=current.name,
            slug=current.slug,
            role=current.role,
            plan=current.plan,
        )

    return AuthContext(
        user=AuthUser(id=user.id, email=user.email, name=user.full_name, role=user.role),
        organization=organization,
        organizations=memberships,
    )


class AuthContextResolver:
    """Resolves a session token into an AuthContext."""

    def __init__(
        self,
        sessions: Optional[SessionStore] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the resolver.

        Args:
            sessions: Session store; defaults to the shared store
            logger: Optional contextual logger for structured logging
        """
        self.sessions = sessions or session_store
        self.logger = logger or default_logger.with_context(component="auth_context")

    async def resolve(
        self,
        db: AsyncSession,
        token: Optional[str],
        requested_organization_id: Optional[str] = None,
    ) -> Optional[AuthContext]:
        """Resolve the caller's AuthContext.

        Returns:
            AuthContext, or None when the token does not lead to an active user

        Raises:
            UpstreamUnavailableException: If the session store cannot be reached
        """
        if not token:
            return None

        session = await self.sessions.get(token)
        if session is None:
            self.logger.debug("Session not found or expired")
            return None

        user = await crud.user.get_with_memberships(db, id=session.user_id)
        if user is None or not user.is_active:
            self.logger.warning(f"Session refers to unknown or inactive user {session.user_id}")
            return None

        # Sliding expiry
        await self.sessions.touch(token)
        return resolve_auth_context(session, user, requested_organization_id)


auth_context_resolver = AuthContextResolver()
