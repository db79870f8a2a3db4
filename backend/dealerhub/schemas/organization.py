"""Organization schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from dealerhub.core.shared_models import OrgRole, PlanType


class OrganizationMembership(BaseModel):
    """An organization as seen by one of its members."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Organization ID")
    name: str
    slug: str
    role: OrgRole
    plan: PlanType
    is_primary: bool = False


class MemberRoleUpdate(BaseModel):
    """Body for changing a member's organization role."""

    role: OrgRole


class Member(BaseModel):
    """Membership row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    organization_id: UUID
    role: OrgRole
    is_primary: bool
