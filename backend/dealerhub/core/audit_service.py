"""Audit trail for state-changing operations."""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import crud
from dealerhub.core.logging import ContextualLogger
from dealerhub.core.logging import logger as default_logger
from dealerhub.schemas.audit_log import AuditLogCreate, RequestMeta


class AuditService:
    """Writes audit entries after the primary write has committed.

    Recording never fails the caller: errors are logged and rolled back.
    """

    def __init__(self, logger: Optional[ContextualLogger] = None):
        """Initialize the audit service.

        Args:
            logger: Optional contextual logger for structured logging
        """
        self.logger = logger or default_logger.with_context(component="audit")

    async def record(
        self,
        db: AsyncSession,
        *,
        action: str,
        resource: Optional[str],
        metadata: Optional[Dict[str, Any]],
        actor_id: Optional[UUID],
        organization_id: Optional[UUID],
        request_meta: Optional[RequestMeta] = None,
    ) -> bool:
        """Persist an audit entry.

        Returns:
            True if the entry was written, False otherwise
        """
        request_meta = request_meta or RequestMeta()
        try:
            await crud.audit_log.create(
                db,
                obj_in=AuditLogCreate(
                    organization_id=organization_id,
                    user_id=actor_id,
                    action=action,
                    resource=resource,
                    metadata=metadata,
                    ip_address=request_meta.ip_address,
                    user_agent=request_meta.user_agent,
                ),
            )
            await db.commit()
        except Exception as e:
            self.logger.error(f"Failed to record audit entry {action} for {resource}: {e}")
            await db.rollback()
            return False

        self.logger.info(
            "Audit log",
            extra={
                "type": "audit",
                "action": action,
                "resource": resource,
                "actor_id": str(actor_id) if actor_id else None,
                "audit_organization_id": str(organization_id) if organization_id else None,
            },
        )
        return True


audit_service = AuditService()
