import logging
from typing import Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.printcost.core.exceptions import PlanLimitExceeded, SheetNotFound, UserNotFound
from src.printcost.crud.crud_parameters import global_parameters as crud_parameters
from src.printcost.crud.crud_sheet import sheet as crud_sheet
from src.printcost.crud.crud_user import user as crud_user
from src.printcost.models.base import utcnow
from src.printcost.models.global_parameters import GlobalParameters
from src.printcost.models.sheet import Sheet
from src.printcost.models.user import User
from src.printcost.schemas.pricing import CostBreakdown, PricingConfig, QuoteRequest
from src.printcost.schemas.sheet import (
    BaseData,
    CustomColumns,
    PlanLimitsResponse,
    SheetCreate,
    SheetRow,
    SheetSummary,
    SheetUpdate,
)
from src.printcost.services.plans import get_plan_limits, parse_tier
from src.printcost.services.pricing import compute_costs, merge_config, recompute_rows
from src.printcost.services.sheet_validator import validate_sheet
from src.printcost.utils.validation import parse_uuid

DEFAULT_SHEET_NAME = "My Sheet"


def dump_json(model) -> dict:
    """Serialize a payload model for a JSON column."""
    return model.model_dump(mode="json", exclude_none=True)


def parameters_as_config(params: GlobalParameters) -> PricingConfig:
    return PricingConfig(
        currency=params.currency,
        cost_per_kg_filament=float(params.cost_per_kg_filament),
        cost_per_kwh=float(params.cost_per_kwh),
        printer_wattage=float(params.printer_wattage),
        cost_per_hour=float(params.cost_per_hour),
        profit_margin_percent=float(params.profit_margin_percent),
    )


class SheetService:
    """Owner-scoped sheet operations with plan enforcement.

    Every lookup filters on the owner, so a sheet that exists but belongs to
    another user is reported exactly like a missing one. Concurrent updates
    of the same sheet are last-write-wins.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def _get_owner(self, db: AsyncSession, owner_id: UUID) -> User:
        owner = await crud_user.get(db, id=owner_id)
        if owner is None:
            raise UserNotFound(owner_id, internal=True)
        return owner

    async def _get_owned(self, db: AsyncSession, sheet_id: Union[str, UUID], owner_id: UUID) -> Sheet:
        parsed = sheet_id if isinstance(sheet_id, UUID) else parse_uuid(sheet_id)
        if parsed is None:
            raise SheetNotFound(sheet_id)
        sheet = await crud_sheet.get_owned(db, id=parsed, owner_id=owner_id)
        if sheet is None:
            raise SheetNotFound(sheet_id)
        return sheet

    def _enforce_limits(self, tier: str, base_data: BaseData, custom_columns: CustomColumns) -> None:
        verdict = validate_sheet(tier, base_data, custom_columns)
        if not verdict.ok:
            self.logger.info(f"Plan limit exceeded for tier {tier}: {verdict.reason}")
            raise PlanLimitExceeded(verdict.reason, {"tier": tier})

    async def _pricing_config(self, db: AsyncSession, config: PricingConfig) -> PricingConfig:
        """Sheet config with unset fields taken from the global parameters."""
        params = await crud_parameters.get_current(db)
        return merge_config(config, parameters_as_config(params))

    async def _with_costs(self, db: AsyncSession, base_data: BaseData) -> BaseData:
        """Price every row and store the config the prices were computed with.

        Stored rows always agree with their stored config.
        """
        config = await self._pricing_config(db, base_data.config)
        return base_data.model_copy(update={"rows": recompute_rows(base_data.rows, config), "config": config})

    async def create(self, db: AsyncSession, owner_id: UUID, sheet_in: SheetCreate) -> Sheet:
        """Create a sheet for `owner_id`, applying defaults for omitted fields.

        Raises:
            PlanLimitExceeded: If rows or custom columns exceed the owner's quota
            UserNotFound: If the owner does not exist
        """
        owner = await self._get_owner(db, owner_id)
        base_data = sheet_in.base_data or BaseData()
        custom_columns = sheet_in.custom_columns or CustomColumns()

        self._enforce_limits(owner.plan_tier, base_data, custom_columns)
        base_data = await self._with_costs(db, base_data)

        sheet = await crud_sheet.create(
            db,
            obj_in={
                "owner_id": owner_id,
                "name": sheet_in.name or DEFAULT_SHEET_NAME,
                "base_data": dump_json(base_data),
                "custom_columns": dump_json(custom_columns),
            },
        )
        self.logger.info(f"Created sheet {sheet.id} for user {owner_id} with {len(base_data.rows)} rows")
        return sheet

    async def list(self, db: AsyncSession, owner_id: UUID) -> list[SheetSummary]:
        """Summaries of the owner's sheets, most recently updated first."""
        sheets = await crud_sheet.get_by_owner(db, owner_id=owner_id)
        return [SheetSummary.model_validate(s) for s in sheets]

    async def get(self, db: AsyncSession, sheet_id: Union[str, UUID], owner_id: UUID) -> Sheet:
        return await self._get_owned(db, sheet_id, owner_id)

    async def update(
        self, db: AsyncSession, sheet_id: Union[str, UUID], owner_id: UUID, sheet_in: SheetUpdate
    ) -> Sheet:
        """Write only the fields present in `sheet_in`.

        When base data or custom columns change, both are validated against
        the owner's plan, taking the stored value for whichever of the two
        was not sent.
        """
        sheet = await self._get_owned(db, sheet_id, owner_id)
        provided = {
            field for field in sheet_in.model_fields_set
            if getattr(sheet_in, field) is not None
        }

        update_data: dict = {}
        if "name" in provided:
            update_data["name"] = sheet_in.name

        if provided & {"base_data", "custom_columns"}:
            owner = await self._get_owner(db, owner_id)
            base_data = sheet_in.base_data if "base_data" in provided else BaseData.model_validate(sheet.base_data)
            custom_columns = (
                sheet_in.custom_columns if "custom_columns" in provided
                else CustomColumns.model_validate(sheet.custom_columns)
            )
            self._enforce_limits(owner.plan_tier, base_data, custom_columns)

            if "base_data" in provided:
                update_data["base_data"] = dump_json(await self._with_costs(db, base_data))
            if "custom_columns" in provided:
                update_data["custom_columns"] = dump_json(custom_columns)

        if not update_data:
            return sheet

        update_data["updated_at"] = utcnow()
        sheet = await crud_sheet.update(db, db_obj=sheet, obj_in=update_data)
        self.logger.info(f"Updated sheet {sheet.id} fields {sorted(provided)}")
        return sheet

    async def delete(self, db: AsyncSession, sheet_id: Union[str, UUID], owner_id: UUID) -> None:
        sheet = await self._get_owned(db, sheet_id, owner_id)
        await crud_sheet.remove(db, db_obj=sheet)
        self.logger.info(f"Deleted sheet {sheet_id} of user {owner_id}")

    async def get_limits(self, db: AsyncSession, owner_id: UUID) -> PlanLimitsResponse:
        owner = await self._get_owner(db, owner_id)
        tier = parse_tier(owner.plan_tier)
        return PlanLimitsResponse(tier=tier, limits=get_plan_limits(tier))

    async def recompute(self, db: AsyncSession, sheet_id: Union[str, UUID], owner_id: UUID) -> Sheet:
        """Recalculate every row from the stored config.

        Config fields the sheet does not carry are filled from the current
        global parameters and saved with it.
        """
        sheet = await self._get_owned(db, sheet_id, owner_id)
        base_data = await self._with_costs(db, BaseData.model_validate(sheet.base_data))
        return await crud_sheet.update(
            db,
            db_obj=sheet,
            obj_in={"base_data": dump_json(base_data), "updated_at": utcnow()},
        )

    async def quote(self, db: AsyncSession, quote_in: QuoteRequest) -> CostBreakdown:
        """Price a single item without storing anything."""
        config = await self._pricing_config(db, quote_in.config)
        row = SheetRow(weight_grams=quote_in.weight_grams, print_hours=quote_in.print_hours)
        return compute_costs(row, config)


sheet_service = SheetService()
