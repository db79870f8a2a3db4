"""CRUD operations for users and their organization memberships."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dealerhub.core.shared_models import OrgRole
from dealerhub.models.user import User
from dealerhub.models.user_organization import UserOrganization


class CRUDUser:
    """CRUD operations for users."""

    def __init__(self):
        """Initialize the CRUD object."""
        self.model = User

    async def get_with_memberships(self, db: AsyncSession, id: UUID) -> Optional[User]:
        """Get a user with memberships and their organizations loaded.

        Args:
            db: Database session
            id: User ID

        Returns:
            User if found, None otherwise
        """
        result = await db.execute(
            select(User)
            .where(User.id == id)
            .options(
                selectinload(User.user_organizations).selectinload(UserOrganization.organization)
            )
        )
        return result.scalar_one_or_none()


class CRUDUserOrganization:
    """CRUD operations for organization memberships."""

    def __init__(self):
        """Initialize the CRUD object."""
        self.model = UserOrganization

    async def get_membership(
        self, db: AsyncSession, organization_id: UUID, user_id: UUID
    ) -> Optional[UserOrganization]:
        """Get the membership row for a (organization, user) pair."""
        result = await db.execute(
            select(UserOrganization).where(
                UserOrganization.organization_id == organization_id,
                UserOrganization.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def update_role(
        self, db: AsyncSession, membership: UserOrganization, role: OrgRole
    ) -> UserOrganization:
        """Change the role on a membership."""
        membership.role = role
        db.add(membership)
        await db.flush()
        await db.refresh(membership)
        return membership

    async def remove(self, db: AsyncSession, membership: UserOrganization) -> None:
        """Delete a membership."""
        await db.delete(membership)
        await db.flush()


user = CRUDUser()
user_organization = CRUDUserOrganization()
