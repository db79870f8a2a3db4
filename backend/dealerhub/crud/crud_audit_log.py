"""CRUD operations for audit log entries."""

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.crud._base import CRUDBase
from dealerhub.models.audit_log import AuditLog
from dealerhub.schemas.audit_log import AuditLogCreate


class CRUDAuditLog(CRUDBase[AuditLog, AuditLogCreate, AuditLogCreate]):
    """CRUD operations for audit log entries."""

    async def create(self, db: AsyncSession, *, obj_in: AuditLogCreate) -> AuditLog:
        """Add an audit entry."""
        data = obj_in.model_dump(exclude={"metadata"})
        data["audit_metadata"] = obj_in.metadata
        return await super().create(db, obj_in=data)


audit_log = CRUDAuditLog(AuditLog)
