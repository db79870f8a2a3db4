"""CRUD operations for organizations."""

from typing import List
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.crud._base import CRUDBase
from dealerhub.models.organization import Organization


class CRUDOrganization(CRUDBase[Organization, BaseModel, BaseModel]):
    """CRUD operations for organizations.

    Organizations are provisioned outside this service, so only reads and
    deletion are exposed here.
    """

    async def get_all_ids(self, db: AsyncSession) -> List[UUID]:
        """Get the IDs of every organization."""
        result = await db.execute(select(Organization.id))
        return list(result.scalars().all())


organization = CRUDOrganization(Organization)
