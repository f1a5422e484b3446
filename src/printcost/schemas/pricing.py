from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import BaseSchema

# Upper bounds for numeric pricing inputs; larger values are rejected with 422
MAX_WEIGHT_GRAMS = 1_000_000_000
MAX_PRINT_HOURS = 1_000_000
MAX_RATE = 1_000_000_000


class PricingConfig(BaseModel):
    """Per-sheet pricing inputs.

    Unset numeric fields are filled from the global parameters (or the
    built-in defaults) when costs are computed.
    """
    model_config = ConfigDict(extra="allow", allow_inf_nan=False)

    currency: str = Field(default="BRL", min_length=3, max_length=3)
    profit_margin_percent: Optional[float] = Field(default=None, le=MAX_RATE)
    cost_per_hour: Optional[float] = Field(default=None, le=MAX_RATE)
    cost_per_kg_filament: Optional[float] = Field(default=None, le=MAX_RATE)
    cost_per_kwh: Optional[float] = Field(default=None, le=MAX_RATE)
    printer_wattage: Optional[float] = Field(default=None, le=MAX_RATE)


class CostBreakdown(BaseSchema):
    """Derived monetary fields of a row, each with 2 decimal places."""
    material_cost: Decimal
    energy_cost: Decimal
    labor_cost: Decimal
    final_price: Decimal


class QuoteRequest(BaseModel):
    """Price a single item without storing it."""
    model_config = ConfigDict(allow_inf_nan=False)

    weight_grams: float = Field(default=0, le=MAX_WEIGHT_GRAMS)
    print_hours: float = Field(default=0, le=MAX_PRINT_HOURS)
    config: PricingConfig = Field(default_factory=PricingConfig)


class FormulaDescription(BaseModel):
    name: str
    formula: str
    description: str
    variables: list[str]
