"""Feature flag definitions and per-organization overrides."""

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealerhub.models._base import Base

if TYPE_CHECKING:
    from dealerhub.models.organization import Organization


class FeatureFlag(Base):
    """Global feature flag definition.

    The key is immutable once created. `percentage`, when set, is a rollout
    fraction in [0, 100] applied deterministically per organization.
    """

    __tablename__ = "feature_flag"

    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    default_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    enabled_for_all: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    percentage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Relationships
    organization_flags: Mapped[List["OrganizationFeatureFlag"]] = relationship(
        "OrganizationFeatureFlag",
        back_populates="feature_flag",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    __table_args__ = (
        CheckConstraint(
            "percentage IS NULL OR (percentage >= 0 AND percentage <= 100)",
            name="ck_feature_flag_percentage_range",
        ),
    )


class OrganizationFeatureFlag(Base):
    """Per-organization override of a feature flag.

    N-to-1 relationship with both Organization and FeatureFlag.
    Ensures each flag can only be overridden once per organization.
    """

    __tablename__ = "organization_feature_flag"

    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    feature_flag_id: Mapped[UUID] = mapped_column(
        ForeignKey("feature_flag.id", ondelete="CASCADE"), nullable=False, index=True
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)
    flag_metadata: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)

    # Relationships
    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="feature_flags", lazy="noload"
    )
    feature_flag: Mapped["FeatureFlag"] = relationship(
        "FeatureFlag", back_populates="organization_flags", lazy="noload"
    )

    __table_args__ = (
        UniqueConstraint("organization_id", "feature_flag_id", name="uq_org_feature_flag"),
    )
