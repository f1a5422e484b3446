from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.printcost.crud.base import CRUDBase
from src.printcost.models.global_parameters import GlobalParameters


class CRUDGlobalParameters(CRUDBase[GlobalParameters]):
    """The global parameters table holds a single row."""

    async def get_current(self, db: AsyncSession) -> GlobalParameters:
        """Return the parameters row, creating it with defaults on first use."""
        stmt = select(GlobalParameters).order_by(GlobalParameters.created_at).limit(1)
        result = await db.execute(stmt)
        params = result.scalar_one_or_none()
        if params is None:
            params = await self.create(db, obj_in={})
        return params


global_parameters = CRUDGlobalParameters(GlobalParameters)
