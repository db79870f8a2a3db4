"""Organization model."""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealerhub.core.shared_models import PlanType, SubscriptionStatus
from dealerhub.models._base import Base

if TYPE_CHECKING:
    from dealerhub.models.audit_log import AuditLog
    from dealerhub.models.feature_flag import OrganizationFeatureFlag
    from dealerhub.models.user_organization import UserOrganization


class Organization(Base):
    """Tenant boundary: owns memberships, flag overrides and audit entries."""

    __tablename__ = "organization"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    plan: Mapped[PlanType] = mapped_column(
        Enum(PlanType, name="plan_type"), nullable=False, default=PlanType.FREE
    )
    subscription_status: Mapped[Optional[SubscriptionStatus]] = mapped_column(
        Enum(SubscriptionStatus, name="subscription_status"), nullable=True
    )

    # Relationships
    user_organizations: Mapped[List["UserOrganization"]] = relationship(
        "UserOrganization",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )
    feature_flags: Mapped[List["OrganizationFeatureFlag"]] = relationship(
        "OrganizationFeatureFlag",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )
    audit_logs: Mapped[List["AuditLog"]] = relationship(
        "AuditLog",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )
