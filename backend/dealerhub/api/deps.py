"""Dependencies that are used in the API endpoints."""

import uuid
from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.api.context import ApiContext
from dealerhub.core.auth_context_service import auth_context_resolver
from dealerhub.core.config import settings
from dealerhub.core.exceptions import (
    InsufficientPermissionsException,
    OrganizationRequiredException,
    UnauthenticatedException,
)
from dealerhub.core.logging import create_contextual_logger
from dealerhub.core.shared_models import OrgRole
from dealerhub.db.session import get_db
from dealerhub.schemas.audit_log import RequestMeta

__all__ = [
    "ensure_active_organization",
    "get_auth_context",
    "get_db",
    "get_request_meta",
    "get_session_token",
    "require_authenticated",
    "require_org_role",
    "require_organization",
    "require_platform_admin",
]


def get_session_token(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    """Read the session token from the bearer header or the session cookie."""
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def get_request_meta(
    request: Request,
    x_forwarded_for: Optional[str] = Header(None),
    user_agent: Optional[str] = Header(None),
) -> RequestMeta:
    """Client address and user agent for audit entries."""
    if x_forwarded_for:
        ip_address = x_forwarded_for.split(",")[0].strip()
    elif request.client:
        ip_address = request.client.host
    else:
        ip_address = None
    return RequestMeta(ip_address=ip_address or "unknown", user_agent=user_agent or "unknown")


async def get_auth_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
    session_token: Optional[str] = Depends(get_session_token),
    request_meta: RequestMeta = Depends(get_request_meta),
    x_organization_id: Optional[str] = Header(None, alias="X-Organization-ID"),
) -> Optional[ApiContext]:
    """Build the API context for the request, if the caller is authenticated.

    The organization is the one recorded on the session unless the
    `X-Organization-ID` header names another organization the user belongs
    to. Other header values are ignored.

    Args:
        request: The FastAPI request object
        db: Database session
        session_token: Token from the bearer header or session cookie
        request_meta: Client details for auditing
        x_organization_id: Optional per-request organization override

    Returns:
        ApiContext, or None for anonymous callers

    Raises:
        UpstreamUnavailableException: If the session store cannot be reached
    """
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    auth = await auth_context_resolver.resolve(db, session_token, x_organization_id)
    if auth is None:
        return None

    base_logger = create_contextual_logger(
        request_id=request_id,
        organization_id=auth.organization.id if auth.organization else None,
        user_id=auth.user.id,
        context_base="api",
    )

    return ApiContext(
        request_id=request_id,
        auth=auth,
        session_token=session_token,
        request_meta=request_meta,
        logger=base_logger,
    )


async def require_authenticated(
    ctx: Optional[ApiContext] = Depends(get_auth_context),
) -> ApiContext:
    """Require a resolved identity.

    Raises:
        UnauthenticatedException: For anonymous callers
    """
    if ctx is None:
        raise UnauthenticatedException()
    return ctx


async def require_organization(
    ctx: ApiContext = Depends(require_authenticated),
) -> ApiContext:
    """Require an active organization.

    Raises:
        OrganizationRequiredException: If the caller has no active organization
    """
    if not ctx.has_organization:
        raise OrganizationRequiredException()
    return ctx


def require_org_role(*roles: OrgRole) -> Callable:
    """Build a dependency that admits only the given organization roles.

    Roles are compared as a set; OWNER does not imply ADMIN.

    Args:
        roles: Allowed roles in the active organization

    Returns:
        FastAPI dependency resolving to the ApiContext
    """
    allowed = frozenset(roles)

    async def _require_org_role(
        ctx: ApiContext = Depends(require_organization),
    ) -> ApiContext:
        if ctx.organization.role not in allowed:
            ctx.logger.info(
                f"Denied: role {ctx.organization.role.value} not in "
                f"{sorted(r.value for r in allowed)}"
            )
            raise InsufficientPermissionsException()
        return ctx

    return _require_org_role


async def require_platform_admin(
    ctx: ApiContext = Depends(require_authenticated),
) -> ApiContext:
    """Require a platform admin user role.

    Raises:
        InsufficientPermissionsException: If the user is not a platform admin
    """
    if not ctx.is_platform_admin:
        raise InsufficientPermissionsException("Admin access required")
    return ctx


def ensure_active_organization(ctx: ApiContext, organization_id: UUID) -> None:
    """Check that a path organization is the caller's active organization.

    Raises:
        InsufficientPermissionsException: If the ids differ
    """
    if ctx.organization is None or ctx.organization.id != organization_id:
        raise InsufficientPermissionsException(
            "Organization does not match the active organization"
        )
