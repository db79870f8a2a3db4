"""Enums shared across models, schemas and services."""

from enum import Enum


class OrgRole(str, Enum):
    """Role of a user inside one organization."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class UserRole(str, Enum):
    """Platform-wide role of a user."""

    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class PlanType(str, Enum):
    """Subscription plan of an organization."""

    FREE = "FREE"
    STARTER = "STARTER"
    PROFESSIONAL = "PROFESSIONAL"
    ENTERPRISE = "ENTERPRISE"


class SubscriptionStatus(str, Enum):
    """Billing subscription status of an organization."""

    ACTIVE = "ACTIVE"
    TRIALING = "TRIALING"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"
    INACTIVE = "INACTIVE"


class FeatureFlagKey(str, Enum):
    """Flag keys the application checks.

    The store may hold additional keys; these are the ones always reported by
    the effective-flags endpoint, resolving to False when undefined.
    """

    API_V2 = "api_v2"
    ADVANCED_SEARCH = "advanced_search"
    BULK_OPERATIONS = "bulk_operations"

    NEW_DASHBOARD = "new_dashboard"
    ANALYTICS_DASHBOARD = "analytics_dashboard"
    REAL_TIME_UPDATES = "real_time_updates"

    AI_VEHICLE_VALIDATION = "ai_vehicle_validation"
    VEHICLE_HISTORY = "vehicle_history"
    VEHICLE_COMPARISON_V2 = "vehicle_comparison_v2"

    TEAM_COLLABORATION = "team_collaboration"
    TEAM_ACTIVITY_FEED = "team_activity_feed"

    ADVANCED_EXPORTS = "advanced_exports"
    CUSTOM_REPORTS = "custom_reports"

    WEBHOOK_INTEGRATIONS = "webhook_integrations"
    THIRD_PARTY_SYNC = "third_party_sync"


class AuditAction(str, Enum):
    """Actions written to the audit trail."""

    FEATURE_FLAG_CREATED = "feature_flag.created"
    FEATURE_FLAG_UPDATED = "feature_flag.updated"
    ORGANIZATION_FLAG_UPDATED = "organization_feature_flag.updated"
    MEMBER_ROLE_UPDATED = "member.role_updated"
    MEMBER_REMOVED = "member.removed"
    MEMBER_LEFT = "member.left"
    ORGANIZATION_SWITCHED = "organization.switched"
    ORGANIZATION_DELETED = "organization.deleted"
