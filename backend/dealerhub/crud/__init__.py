"""CRUD objects for the dealerhub models."""

from dealerhub.crud.crud_audit_log import audit_log
from dealerhub.crud.crud_feature_flag import feature_flag
from dealerhub.crud.crud_organization import organization
from dealerhub.crud.crud_organization_feature_flag import organization_feature_flag
from dealerhub.crud.crud_user import user, user_organization

__all__ = [
    "audit_log",
    "feature_flag",
    "organization",
    "organization_feature_flag",
    "user",
    "user_organization",
]
