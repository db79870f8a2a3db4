"""Audit log model."""

from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealerhub.models._base import Base

if TYPE_CHECKING:
    from dealerhub.models.organization import Organization


class AuditLog(Base):
    """Record of a state-changing action taken by a user."""

    __tablename__ = "audit_log"

    organization_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("organization.id", ondelete="CASCADE"), nullable=True, index=True
    )
    user_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    audit_metadata: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    organization: Mapped[Optional["Organization"]] = relationship(
        "Organization", back_populates="audit_logs", lazy="noload"
    )
