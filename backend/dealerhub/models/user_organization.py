"""Membership of a user in an organization."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealerhub.core.shared_models import OrgRole
from dealerhub.models._base import Base

if TYPE_CHECKING:
    from dealerhub.models.organization import Organization
    from dealerhub.models.user import User


class UserOrganization(Base):
    """One row per (user, organization) pair carrying the member's role."""

    __tablename__ = "user_organization"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[OrgRole] = mapped_column(
        Enum(OrgRole, name="org_role"), nullable=False, default=OrgRole.MEMBER
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="user_organizations", lazy="noload")
    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="user_organizations", lazy="noload"
    )

    __table_args__ = (UniqueConstraint("user_id", "organization_id", name="uq_user_org"),)
