"""Models for the dealerhub backend."""

from dealerhub.models._base import Base
from dealerhub.models.audit_log import AuditLog
from dealerhub.models.feature_flag import FeatureFlag, OrganizationFeatureFlag
from dealerhub.models.organization import Organization
from dealerhub.models.user import User
from dealerhub.models.user_organization import UserOrganization

__all__ = [
    "AuditLog",
    "Base",
    "FeatureFlag",
    "Organization",
    "OrganizationFeatureFlag",
    "User",
    "UserOrganization",
]
