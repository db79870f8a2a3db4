"""Authorization context schemas.

These are derived per request and never persisted.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from dealerhub.core.shared_models import OrgRole, PlanType, UserRole
from dealerhub.schemas.organization import OrganizationMembership


class AuthUser(BaseModel):
    """Identity of the caller."""

    id: UUID
    email: str
    name: Optional[str] = None
    role: UserRole


class AuthOrganization(BaseModel):
    """Active organization of the caller with their role in it."""

    id: UUID
    name: str
    slug: str
    role: OrgRole
    plan: PlanType


class AuthContext(BaseModel):
    """Authenticated identity plus the active organization scope.

    `organization` is only ever a membership the user actually holds.
    """

    user: AuthUser
    organization: Optional[AuthOrganization] = None
    organizations: List[OrganizationMembership] = Field(default_factory=list)


class SessionData(BaseModel):
    """Payload stored for a session token."""

    user_id: UUID
    current_organization_id: Optional[UUID] = None
    created_at: datetime


class SwitchOrganizationRequest(BaseModel):
    """Body for persisting a new current organization on the session."""

    model_config = ConfigDict(populate_by_name=True)

    organization_id: Optional[UUID] = Field(None, alias="organizationId")


class OrganizationsOverview(BaseModel):
    """Current organization and every membership of the caller."""

    current_organization: Optional[AuthOrganization] = None
    organizations: List[OrganizationMembership] = Field(default_factory=list)
