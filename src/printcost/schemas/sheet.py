from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .base import BaseResponseSchema, BaseSchema
from .enums import ColumnType, Material, PlanTier
from .pricing import MAX_PRINT_HOURS, MAX_WEIGHT_GRAMS, PricingConfig

ZERO = Decimal("0.00")


class SheetRow(BaseModel):
    """One item of a sheet.

    Extra keys hold the values of the sheet's custom columns. The four cost
    fields are derived and overwritten every time the row is saved.
    """
    model_config = ConfigDict(extra="allow", allow_inf_nan=False)

    id: Optional[int | str] = None
    item: str = ""
    material: Material = Material.PLA
    weight_grams: float = Field(default=0, le=MAX_WEIGHT_GRAMS)
    print_hours: float = Field(default=0, le=MAX_PRINT_HOURS)
    additional_items: float = 0
    packaging: float = 0
    marketplace_fee_percent: float = 0
    material_cost: Decimal = ZERO
    energy_cost: Decimal = ZERO
    labor_cost: Decimal = ZERO
    final_price: Decimal = ZERO


def default_config() -> PricingConfig:
    return PricingConfig(currency="BRL", profit_margin_percent=30, cost_per_hour=50)


class BaseData(BaseModel):
    rows: list[SheetRow] = Field(default_factory=list)
    config: PricingConfig = Field(default_factory=default_config)


class CustomColumn(BaseModel):
    model_config = ConfigDict(extra="allow")

    key: str
    label: str
    type: ColumnType = ColumnType.TEXT


class CustomColumns(BaseModel):
    columns: list[CustomColumn] = Field(default_factory=list)


class SheetCreate(BaseModel):
    """Schema for creating a sheet. Every field is optional."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    base_data: Optional[BaseData] = None
    custom_columns: Optional[CustomColumns] = None


class SheetUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    base_data: Optional[BaseData] = None
    custom_columns: Optional[CustomColumns] = None


class SheetResponse(BaseResponseSchema):
    owner_id: UUID
    name: str
    base_data: BaseData
    custom_columns: CustomColumns


class SheetSummary(BaseSchema):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime


class PlanLimits(BaseSchema):
    """Quota for a tier; -1 means unlimited."""
    max_rows: int
    max_custom_columns: int

    def unlimited_rows(self) -> bool:
        return self.max_rows == -1

    def unlimited_columns(self) -> bool:
        return self.max_custom_columns == -1


class PlanLimitsResponse(BaseSchema):
    tier: PlanTier
    limits: PlanLimits
