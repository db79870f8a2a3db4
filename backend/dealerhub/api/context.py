"""Request context passed to every endpoint."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from dealerhub.core.logging import ContextualLogger
from dealerhub.core.shared_models import UserRole
from dealerhub.schemas.audit_log import RequestMeta
from dealerhub.schemas.auth import AuthContext, AuthOrganization, AuthUser
from dealerhub.schemas.organization import OrganizationMembership

PLATFORM_ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPERADMIN})


class ApiContext(BaseModel):
    """Authorization context of a request plus request-scoped helpers.

    Built fresh for every request and discarded afterwards.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    request_id: str
    auth: AuthContext
    session_token: Optional[str] = None
    request_meta: RequestMeta = RequestMeta()
    logger: ContextualLogger

    @property
    def user(self) -> AuthUser:
        """Authenticated user."""
        return self.auth.user

    @property
    def organization(self) -> Optional[AuthOrganization]:
        """Active organization, if any."""
        return self.auth.organization

    @property
    def organizations(self) -> List[OrganizationMembership]:
        """Every organization the user belongs to."""
        return self.auth.organizations

    @property
    def has_organization(self) -> bool:
        """Whether an organization is active for this request."""
        return self.auth.organization is not None

    @property
    def is_platform_admin(self) -> bool:
        """Whether the user may manage global flag definitions."""
        return self.auth.user.role in PLATFORM_ADMIN_ROLES

    def __str__(self) -> str:
        """Compact representation for logs."""
        org = self.organization.id if self.organization else None
        return f"ApiContext(request_id={self.request_id}, user={self.user.email}, org={org})"
