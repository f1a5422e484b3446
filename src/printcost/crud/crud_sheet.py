from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.printcost.crud.base import CRUDBase
from src.printcost.models.sheet import Sheet


class CRUDSheet(CRUDBase[Sheet]):
    """CRUD operations for sheets, always scoped to an owner."""

    async def get_owned(self, db: AsyncSession, *, id: UUID, owner_id: UUID) -> Optional[Sheet]:
        """Get a sheet only if it belongs to `owner_id`."""
        stmt = select(Sheet).where(Sheet.id == id, Sheet.owner_id == owner_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_owner(self, db: AsyncSession, *, owner_id: UUID) -> list[Sheet]:
        """All sheets of an owner, most recently updated first."""
        stmt = (
            select(Sheet)
            .where(Sheet.owner_id == owner_id)
            .order_by(Sheet.updated_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_since(self, db: AsyncSession, *, since) -> int:
        stmt = select(func.count()).select_from(Sheet).where(Sheet.created_at >= since)
        result = await db.execute(stmt)
        return result.scalar_one()


sheet = CRUDSheet(Sheet)
