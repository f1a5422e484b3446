from fastapi import APIRouter, status

from src.printcost.api.auth_deps import CurrentUser
from src.printcost.db.session import SessionDep
from src.printcost.schemas.pricing import CostBreakdown, QuoteRequest
from src.printcost.schemas.sheet import (
    PlanLimitsResponse,
    SheetCreate,
    SheetResponse,
    SheetSummary,
    SheetUpdate,
)
from src.printcost.services.sheet_service import sheet_service

router = APIRouter()


@router.get("", response_model=list[SheetSummary])
async def list_sheets(current_user: CurrentUser, db: SessionDep) -> list[SheetSummary]:
    """List the current user's sheets, most recently updated first."""
    return await sheet_service.list(db, current_user.id)


@router.post("", response_model=SheetResponse, status_code=status.HTTP_201_CREATED)
async def create_sheet(sheet_in: SheetCreate, current_user: CurrentUser, db: SessionDep):
    """
    Create a sheet. Omitted fields get defaults: name "My Sheet", no rows,
    the default pricing config and no custom columns.

    Raises:
        PlanLimitExceeded: Rows or custom columns above the plan quota (400)
    """
    return await sheet_service.create(db, current_user.id, sheet_in)


@router.get("/limits", response_model=PlanLimitsResponse)
async def read_plan_limits(current_user: CurrentUser, db: SessionDep) -> PlanLimitsResponse:
    """Row and custom column quotas of the current user's plan."""
    return await sheet_service.get_limits(db, current_user.id)


@router.post("/quote", response_model=CostBreakdown)
async def quote(quote_in: QuoteRequest, current_user: CurrentUser, db: SessionDep) -> CostBreakdown:
    """Price one item with the given config without saving anything."""
    return await sheet_service.quote(db, quote_in)


@router.get("/{sheet_id}", response_model=SheetResponse)
async def read_sheet(sheet_id: str, current_user: CurrentUser, db: SessionDep):
    return await sheet_service.get(db, sheet_id, current_user.id)


@router.put("/{sheet_id}", response_model=SheetResponse)
async def update_sheet(sheet_id: str, sheet_in: SheetUpdate, current_user: CurrentUser, db: SessionDep):
    """Partial update; fields missing from the body keep their stored values."""
    return await sheet_service.update(db, sheet_id, current_user.id, sheet_in)


@router.delete("/{sheet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sheet(sheet_id: str, current_user: CurrentUser, db: SessionDep) -> None:
    await sheet_service.delete(db, sheet_id, current_user.id)


@router.post("/{sheet_id}/recompute", response_model=SheetResponse)
async def recompute_sheet(sheet_id: str, current_user: CurrentUser, db: SessionDep):
    """Recalculate the derived cost fields of every row."""
    return await sheet_service.recompute(db, sheet_id, current_user.id)
