from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.printcost.crud.base import CRUDBase
from src.printcost.models.role import Role
from src.printcost.models.sheet import Sheet
from src.printcost.models.user import User
from src.printcost.schemas.enums import UserStatus


class CRUDUser(CRUDBase[User]):
    """CRUD operations for user management."""

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get a user by email."""
        stmt = select(User).where(User.email == email)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_oauth(self, db: AsyncSession, *, provider: str, provider_id: str) -> Optional[User]:
        stmt = select(User).where(
            User.oauth_provider == provider,
            User.oauth_provider_id == provider_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def email_taken(self, db: AsyncSession, *, email: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check whether another account already uses `email`."""
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await db.execute(stmt)
        return result.first() is not None

    async def get_with_permissions(self, db: AsyncSession, *, id: UUID) -> Optional[User]:
        """Load a user together with role and role permissions."""
        stmt = (
            select(User)
            .options(selectinload(User.role).selectinload(Role.permissions))
            .where(User.id == id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 50,
        plan_tier: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[tuple[User, int]], int]:
        """Filtered, paginated user listing with per-user sheet counts.

        Returns:
            tuple: ([(user, sheet_count), ...], total matching users)
        """
        filters = []
        if plan_tier:
            filters.append(User.plan_tier == plan_tier)
        if status:
            filters.append(User.status == status)
        if search:
            pattern = f"%{search}%"
            filters.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

        sheet_counts = (
            select(Sheet.owner_id, func.count(Sheet.id).label("sheet_count"))
            .group_by(Sheet.owner_id)
            .subquery()
        )
        stmt = (
            select(User, func.coalesce(sheet_counts.c.sheet_count, 0))
            .outerjoin(sheet_counts, sheet_counts.c.owner_id == User.id)
            .where(*filters)
            .order_by(User.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        rows = [(user, count) for user, count in result.all()]

        total_stmt = select(func.count()).select_from(User).where(*filters)
        total = (await db.execute(total_stmt)).scalar_one()
        return rows, total

    async def count_active(self, db: AsyncSession) -> int:
        stmt = select(func.count()).select_from(User).where(User.status == UserStatus.ACTIVE.value)
        result = await db.execute(stmt)
        return result.scalar_one()

    async def count_since(self, db: AsyncSession, *, since) -> int:
        stmt = select(func.count()).select_from(User).where(User.created_at >= since)
        result = await db.execute(stmt)
        return result.scalar_one()


user = CRUDUser(User)
