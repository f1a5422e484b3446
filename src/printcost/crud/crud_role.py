from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.printcost.crud.base import CRUDBase
from src.printcost.models.role import Permission, Role, RolePermission


class CRUDRole(CRUDBase[Role]):
    """CRUD operations for roles and their permission links."""

    async def get_with_permissions(self, db: AsyncSession, *, id: UUID) -> Optional[Role]:
        stmt = (
            select(Role)
            .options(selectinload(Role.permissions), selectinload(Role.role_permissions))
            .where(Role.id == id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active(self, db: AsyncSession) -> list[Role]:
        """Active roles with their permissions, ordered by name."""
        stmt = (
            select(Role)
            .options(selectinload(Role.permissions))
            .where(Role.is_active.is_(True))
            .order_by(Role.name)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def create_with_permissions(
        self,
        db: AsyncSession,
        *,
        name: str,
        description: Optional[str],
        permissions: Sequence[Permission],
    ) -> Role:
        role = Role(name=name, description=description)
        role.role_permissions = [RolePermission(permission=p) for p in permissions]
        db.add(role)
        await db.commit()
        role_id = role.id
        db.expire(role)
        return await self.get_with_permissions(db, id=role_id)

    async def set_permissions(
        self, db: AsyncSession, *, role: Role, permissions: Sequence[Permission]
    ) -> Role:
        """Replace the permission set of `role` (loaded with `role_permissions`)."""
        wanted = {p.id: p for p in permissions}
        kept = [link for link in role.role_permissions if link.permission_id in wanted]
        kept_ids = {link.permission_id for link in kept}
        added = [RolePermission(permission=p) for pid, p in wanted.items() if pid not in kept_ids]
        role.role_permissions = kept + added
        db.add(role)
        await db.commit()
        role_id = role.id
        db.expire(role)
        return await self.get_with_permissions(db, id=role_id)


class CRUDPermission(CRUDBase[Permission]):
    """CRUD operations for permissions."""

    async def get_all_ordered(self, db: AsyncSession) -> list[Permission]:
        stmt = select(Permission).order_by(Permission.module, Permission.action)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, db: AsyncSession, *, ids: Sequence[UUID]) -> list[Permission]:
        if not ids:
            return []
        stmt = select(Permission).where(Permission.id.in_(ids))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_key(self, db: AsyncSession, *, module: str, action: str) -> Optional[Permission]:
        stmt = select(Permission).where(Permission.module == module, Permission.action == action)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()


role = CRUDRole(Role)
permission = CRUDPermission(Permission)
