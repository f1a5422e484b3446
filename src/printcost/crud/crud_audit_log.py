from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.printcost.crud.base import CRUDBase
from src.printcost.models.audit_log import AuditLog


class CRUDAuditLog(CRUDBase[AuditLog]):
    """Append and query administrative audit records."""

    async def record(
        self,
        db: AsyncSession,
        *,
        action: str,
        admin_id: UUID,
        target_id: Optional[UUID] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditLog:
        return await self.create(
            db,
            obj_in={
                "action": action,
                "admin_id": admin_id,
                "target_id": target_id,
                "details": details,
            },
        )

    async def search(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        action: Optional[str] = None,
        admin_id: Optional[UUID] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[list[AuditLog], int]:
        filters = []
        if action:
            filters.append(AuditLog.action == action)
        if admin_id:
            filters.append(AuditLog.admin_id == admin_id)
        if start:
            filters.append(AuditLog.created_at >= start)
        if end:
            filters.append(AuditLog.created_at <= end)

        stmt = (
            select(AuditLog)
            .where(*filters)
            .order_by(AuditLog.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        total_stmt = select(func.count()).select_from(AuditLog).where(*filters)
        total = (await db.execute(total_stmt)).scalar_one()
        return list(result.scalars().all()), total


audit_log = CRUDAuditLog(AuditLog)
