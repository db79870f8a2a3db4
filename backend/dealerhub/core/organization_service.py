"""Organization membership management and deletion."""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import crud, schemas
from dealerhub.api.context import ApiContext
from dealerhub.core.audit_service import AuditService, audit_service
from dealerhub.core.exceptions import (
    InsufficientPermissionsException,
    InvalidStateError,
    NotFoundException,
)
from dealerhub.core.flag_cache_service import FeatureFlagCache, flag_cache
from dealerhub.core.shared_models import AuditAction, OrgRole, SubscriptionStatus


class OrganizationService:
    """Changes to organizations and their memberships."""

    def __init__(
        self,
        cache: Optional[FeatureFlagCache] = None,
        audit: Optional[AuditService] = None,
    ):
        """Initialize the service.

        Args:
            cache: Flag cache evicted when an organization is deleted
            audit: Audit service; defaults to the shared service
        """
        self.cache = cache or flag_cache
        self.audit = audit or audit_service

    async def update_member_role(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
        role: OrgRole,
        ctx: ApiContext,
    ) -> schemas.Member:
        """Change a member's role.

        The OWNER role is neither granted nor taken away here, so every
        organization keeps its owner. The new role takes effect on the
        member's next request, since the authorization context is rebuilt
        from the store every time.

        Raises:
            NotFoundException: If the user is not a member
            InsufficientPermissionsException: If the change involves the OWNER role
        """
        if role == OrgRole.OWNER:
            raise InsufficientPermissionsException("Cannot assign the owner role")

        membership = await crud.user_organization.get_membership(db, organization_id, user_id)
        if membership is None:
            raise NotFoundException("Member not found")

        if membership.role == OrgRole.OWNER:
            raise InsufficientPermissionsException("Cannot change owner role")

        previous_role = membership.role
        membership = await crud.user_organization.update_role(db, membership, role)
        await db.commit()
        await db.refresh(membership)
        result = schemas.Member.model_validate(membership)

        ctx.logger.info(f"Member {user_id} role changed {previous_role.value} -> {role.value}")
        await self.audit.record(
            db,
            action=AuditAction.MEMBER_ROLE_UPDATED.value,
            resource=str(user_id),
            metadata={"role": role.value, "previous_role": previous_role.value},
            actor_id=ctx.user.id,
            organization_id=organization_id,
            request_meta=ctx.request_meta,
        )
        return result

    async def remove_member(
        self,
        db: AsyncSession,
        organization_id: UUID,
        user_id: UUID,
        ctx: ApiContext,
    ) -> None:
        """Remove a member, or let a member leave.

        Raises:
            NotFoundException: If the user is not a member
            InsufficientPermissionsException: If the member is the owner, or the
                caller lacks OWNER/ADMIN and is not removing themselves
        """
        membership = await crud.user_organization.get_membership(db, organization_id, user_id)
        if membership is None:
            raise NotFoundException("Member not found")

        if membership.role == OrgRole.OWNER:
            raise InsufficientPermissionsException("Cannot remove organization owner")

        is_self = user_id == ctx.user.id
        acting_role = ctx.organization.role if ctx.organization else None
        if not is_self and acting_role not in {OrgRole.OWNER, OrgRole.ADMIN}:
            raise InsufficientPermissionsException()

        removed_role = membership.role
        await crud.user_organization.remove(db, membership)
        await db.commit()

        ctx.logger.info(f"Member {user_id} removed from organization {organization_id}")
        await self.audit.record(
            db,
            action=(AuditAction.MEMBER_LEFT if is_self else AuditAction.MEMBER_REMOVED).value,
            resource=str(user_id),
            metadata={"removed_role": removed_role.value},
            actor_id=ctx.user.id,
            organization_id=organization_id,
            request_meta=ctx.request_meta,
        )

    async def delete_organization(
        self, db: AsyncSession, organization_id: UUID, ctx: ApiContext
    ) -> None:
        """Delete an organization and everything it owns.

        Raises:
            InsufficientPermissionsException: If the caller is not an owner
            NotFoundException: If the organization does not exist
            InvalidStateError: While the subscription is active
        """
        membership = await crud.user_organization.get_membership(
            db, organization_id, ctx.user.id
        )
        if membership is None or membership.role != OrgRole.OWNER:
            raise InsufficientPermissionsException(
                "Only organization owners can delete organizations"
            )

        organization = await crud.organization.get(db, id=organization_id)
        if organization is None:
            raise NotFoundException("Organization not found")

        if organization.subscription_status == SubscriptionStatus.ACTIVE:
            raise InvalidStateError(
                "Please cancel your subscription before deleting the organization"
            )

        deleted = {"name": organization.name, "slug": organization.slug}
        await crud.organization.remove(db, id=organization_id)
        await db.commit()

        await self.cache.invalidate(organization_id)
        ctx.logger.info(f"Organization {organization_id} deleted")
        # Entries scoped to the organization were cascaded away with it
        await self.audit.record(
            db,
            action=AuditAction.ORGANIZATION_DELETED.value,
            resource=str(organization_id),
            metadata=deleted,
            actor_id=ctx.user.id,
            organization_id=None,
            request_meta=ctx.request_meta,
        )


organization_service = OrganizationService()
