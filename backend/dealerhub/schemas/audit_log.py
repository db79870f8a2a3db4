"""Audit log schemas."""

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel


class AuditLogCreate(BaseModel):
    """Audit entry to persist."""

    organization_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    action: str
    resource: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class RequestMeta(BaseModel):
    """Client details captured from the request for auditing."""

    ip_address: str = "unknown"
    user_agent: str = "unknown"
