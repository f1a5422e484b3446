"""Cost formulas for 3D printed items.

All arithmetic runs on `Decimal` values built from the decimal text of each
input, so results match what a person computing by hand would get
(2.5 * 0.65 * 0.2 is exactly 0.325 and rounds to 0.33).
"""
from decimal import ROUND_HALF_UP, Context, Decimal, localcontext
from typing import Iterable, Optional

from src.printcost.schemas.pricing import CostBreakdown, FormulaDescription, PricingConfig
from src.printcost.schemas.sheet import SheetRow

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
LABOR_SHARE = Decimal("0.2")  # share of print time billed as labor
THOUSAND = Decimal("1000")
HUNDRED = Decimal("100")

# Wide enough to carry the largest accepted inputs through every formula to cents
PRICING_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP)

PRICING_FIELDS = (
    "cost_per_kg_filament",
    "cost_per_kwh",
    "printer_wattage",
    "cost_per_hour",
    "profit_margin_percent",
)

DEFAULT_PRICING = PricingConfig(
    currency="BRL",
    cost_per_kg_filament=80,
    cost_per_kwh=0.65,
    printer_wattage=200,
    cost_per_hour=50,
    profit_margin_percent=30,
)

FORMULAS: list[FormulaDescription] = [
    FormulaDescription(
        name="material_cost",
        formula="(weight_grams / 1000) * cost_per_kg_filament",
        description="Material cost from the printed weight",
        variables=["weight_grams", "cost_per_kg_filament"],
    ),
    FormulaDescription(
        name="energy_cost",
        formula="print_hours * cost_per_kwh * (printer_wattage / 1000)",
        description="Energy used by the printer during the print",
        variables=["print_hours", "cost_per_kwh", "printer_wattage"],
    ),
    FormulaDescription(
        name="labor_cost",
        formula="(print_hours * 0.2) * cost_per_hour",
        description="Labor, billed as 20% of the print time",
        variables=["print_hours", "cost_per_hour"],
    ),
    FormulaDescription(
        name="final_price",
        formula="(material_cost + energy_cost + labor_cost) * (1 + profit_margin_percent / 100)",
        description="Subtotal with the profit margin applied",
        variables=["material_cost", "energy_cost", "labor_cost", "profit_margin_percent"],
    ),
]


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Decimal) -> Decimal:
    """Round half up to cents."""
    with localcontext(PRICING_CONTEXT):
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def merge_config(config: Optional[PricingConfig], fallback: PricingConfig) -> PricingConfig:
    """Fill the unset pricing fields of `config` from `fallback`."""
    if config is None:
        return fallback.model_copy()
    missing = {
        field: getattr(fallback, field)
        for field in PRICING_FIELDS
        if getattr(config, field) is None
    }
    return config.model_copy(update=missing)


def compute_costs(row: SheetRow, config: Optional[PricingConfig] = None) -> CostBreakdown:
    """Compute the four derived cost fields of a row.

    Rows without a positive weight and a positive print time price at zero.
    The final price is derived from the unrounded subtotal and rounded once.
    """
    if row.weight_grams <= 0 or row.print_hours <= 0:
        return CostBreakdown(material_cost=ZERO, energy_cost=ZERO, labor_cost=ZERO, final_price=ZERO)

    resolved = merge_config(config, DEFAULT_PRICING)
    weight = to_decimal(row.weight_grams)
    hours = to_decimal(row.print_hours)

    with localcontext(PRICING_CONTEXT):
        material_cost = (weight / THOUSAND) * to_decimal(resolved.cost_per_kg_filament)
        energy_cost = hours * to_decimal(resolved.cost_per_kwh) * (to_decimal(resolved.printer_wattage) / THOUSAND)
        labor_cost = (hours * LABOR_SHARE) * to_decimal(resolved.cost_per_hour)
        subtotal = material_cost + energy_cost + labor_cost
        final_price = subtotal * (1 + to_decimal(resolved.profit_margin_percent) / HUNDRED)

    return CostBreakdown(
        material_cost=money(material_cost),
        energy_cost=money(energy_cost),
        labor_cost=money(labor_cost),
        final_price=money(final_price),
    )


def apply_costs(row: SheetRow, config: Optional[PricingConfig] = None) -> SheetRow:
    """Return a copy of `row` whose derived fields match `compute_costs`."""
    costs = compute_costs(row, config)
    return row.model_copy(update=costs.model_dump())


def recompute_rows(rows: Iterable[SheetRow], config: Optional[PricingConfig] = None) -> list[SheetRow]:
    return [apply_costs(row, config) for row in rows]
