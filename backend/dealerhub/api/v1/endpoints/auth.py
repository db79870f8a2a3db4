"""Session-scoped endpoints: organization switching and logout."""

from typing import Optional

from fastapi import Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import schemas
from dealerhub.api import deps
from dealerhub.api.context import ApiContext
from dealerhub.api.router import TrailingSlashRouter
from dealerhub.core.audit_service import audit_service
from dealerhub.core.config import settings
from dealerhub.core.exceptions import InsufficientPermissionsException
from dealerhub.core.session_store import session_store
from dealerhub.core.shared_models import AuditAction

router = TrailingSlashRouter()


@router.get("/organizations", response_model=schemas.OrganizationsOverview)
async def read_organizations(
    *,
    ctx: ApiContext = Depends(deps.require_authenticated),
) -> schemas.OrganizationsOverview:
    """The caller's current organization and every membership."""
    return schemas.OrganizationsOverview(
        current_organization=ctx.organization,
        organizations=ctx.organizations,
    )


@router.post("/switch-organization", response_model=schemas.OrganizationsOverview)
async def switch_organization(
    *,
    db: AsyncSession = Depends(deps.get_db),
    switch_in: schemas.SwitchOrganizationRequest,
    ctx: ApiContext = Depends(deps.require_authenticated),
) -> schemas.OrganizationsOverview:
    """Persist a new current organization on the caller's session.

    Args:
        db: The database session
        switch_in: The organization to switch to
        ctx: The API context

    Returns:
        The new current organization and every membership

    Raises:
        HTTPException: If no organization id is given
        InsufficientPermissionsException: If the caller is not a member
    """
    if switch_in.organization_id is None:
        raise HTTPException(status_code=400, detail="Organization ID is required")

    target = next((m for m in ctx.organizations if m.id == switch_in.organization_id), None)
    if target is None:
        raise InsufficientPermissionsException("Not a member of this organization")

    previous_id = ctx.organization.id if ctx.organization else None
    await session_store.set_current_organization(ctx.session_token, target.id)
    ctx.logger.info(f"Switched organization {previous_id} -> {target.id}")

    await audit_service.record(
        db,
        action=AuditAction.ORGANIZATION_SWITCHED.value,
        resource=str(target.id),
        metadata={"from": str(previous_id) if previous_id else None, "to": str(target.id)},
        actor_id=ctx.user.id,
        organization_id=target.id,
        request_meta=ctx.request_meta,
    )

    return schemas.OrganizationsOverview(
        current_organization=schemas.AuthOrganization(
            id=target.id,
            name=target.name,
            slug=target.slug,
            role=target.role,
            plan=target.plan,
        ),
        organizations=ctx.organizations,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    *,
    session_token: Optional[str] = Depends(deps.get_session_token),
) -> Response:
    """Destroy the caller's session. Logging out twice is not an error."""
    if session_token:
        await session_store.destroy(session_token)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
