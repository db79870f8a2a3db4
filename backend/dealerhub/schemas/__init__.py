"""Schemas for the dealerhub backend."""

from dealerhub.schemas.audit_log import AuditLogCreate, RequestMeta
from dealerhub.schemas.auth import (
    AuthContext,
    AuthOrganization,
    AuthUser,
    OrganizationsOverview,
    SessionData,
    SwitchOrganizationRequest,
)
from dealerhub.schemas.feature_flag import (
    FeatureFlag,
    FeatureFlagCreate,
    FeatureFlagUpdate,
    FeatureFlagWithCount,
    FeatureFlagWithOverride,
    OrganizationFeatureFlag,
    OrganizationFeatureFlagUpsert,
)
from dealerhub.schemas.organization import Member, MemberRoleUpdate, OrganizationMembership

__all__ = [
    "AuditLogCreate",
    "AuthContext",
    "AuthOrganization",
    "AuthUser",
    "FeatureFlag",
    "FeatureFlagCreate",
    "FeatureFlagUpdate",
    "FeatureFlagWithCount",
    "FeatureFlagWithOverride",
    "Member",
    "MemberRoleUpdate",
    "OrganizationFeatureFlag",
    "OrganizationFeatureFlagUpsert",
    "OrganizationMembership",
    "OrganizationsOverview",
    "RequestMeta",
    "SessionData",
    "SwitchOrganizationRequest",
]
