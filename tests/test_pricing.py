from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.printcost.schemas.pricing import MAX_PRINT_HOURS, MAX_RATE, MAX_WEIGHT_GRAMS, PricingConfig, QuoteRequest
from src.printcost.schemas.sheet import SheetRow
from src.printcost.services.pricing import (
    DEFAULT_PRICING,
    FORMULAS,
    apply_costs,
    compute_costs,
    merge_config,
    recompute_rows,
)

ZERO = Decimal("0.00")


def test_reference_item_with_default_pricing():
    costs = compute_costs(SheetRow(weight_grams=15, print_hours=2.5), DEFAULT_PRICING)
    assert costs.material_cost == Decimal("1.20")
    assert costs.energy_cost == Decimal("0.33")
    assert costs.labor_cost == Decimal("25.00")
    # 26.525 * 1.3 = 34.4825, taken from the unrounded subtotal
    assert costs.final_price == Decimal("34.48")


def test_missing_config_uses_defaults():
    costs = compute_costs(SheetRow(weight_grams=15, print_hours=2.5))
    assert costs.final_price == Decimal("34.48")


def test_results_have_two_decimal_places():
    costs = compute_costs(SheetRow(weight_grams=33.3, print_hours=1.7))
    for value in costs.model_dump().values():
        assert value.as_tuple().exponent == -2


def test_zero_weight_prices_at_zero():
    costs = compute_costs(SheetRow(weight_grams=0, print_hours=3))
    assert costs.model_dump() == {
        "material_cost": ZERO,
        "energy_cost": ZERO,
        "labor_cost": ZERO,
        "final_price": ZERO,
    }


def test_negative_hours_price_at_zero():
    costs = compute_costs(SheetRow(weight_grams=50, print_hours=-1))
    assert costs.final_price == ZERO


def test_zero_margin_is_kept():
    config = PricingConfig(profit_margin_percent=0)
    costs = compute_costs(SheetRow(weight_grams=15, print_hours=2.5), config)
    assert costs.final_price == Decimal("26.53")


def test_merge_config_fills_only_missing_fields():
    config = PricingConfig(currency="USD", cost_per_hour=10, profit_margin_percent=0)
    merged = merge_config(config, DEFAULT_PRICING)
    assert merged.currency == "USD"
    assert merged.cost_per_hour == 10
    assert merged.profit_margin_percent == 0
    assert merged.cost_per_kg_filament == 80
    assert merged.printer_wattage == 200


def test_merge_config_keeps_extra_keys():
    config = PricingConfig.model_validate({"printer": "Ender 3"})
    merged = merge_config(config, DEFAULT_PRICING)
    assert merged.model_extra == {"printer": "Ender 3"}


def test_apply_costs_overwrites_client_values():
    row = SheetRow(weight_grams=15, print_hours=2.5, final_price=Decimal("999.99"))
    priced = apply_costs(row)
    assert priced.final_price == Decimal("34.48")
    assert priced.weight_grams == 15


def test_recompute_is_idempotent():
    rows = [
        SheetRow(item="Vase", weight_grams=120, print_hours=6),
        SheetRow(item="Hook", weight_grams=8.5, print_hours=0.75),
    ]
    once = recompute_rows(rows)
    twice = recompute_rows(once)
    assert [r.model_dump() for r in once] == [r.model_dump() for r in twice]


def test_custom_column_values_survive_recompute():
    row = SheetRow.model_validate({"item": "Vase", "weight_grams": 10, "print_hours": 1, "color": "red"})
    priced = apply_costs(row)
    assert priced.model_extra == {"color": "red"}


def test_formula_descriptions():
    assert [f.name for f in FORMULAS] == ["material_cost", "energy_cost", "labor_cost", "final_price"]


def test_largest_accepted_inputs_are_priced():
    config = PricingConfig(
        cost_per_kg_filament=MAX_RATE,
        cost_per_kwh=MAX_RATE,
        printer_wattage=MAX_RATE,
        cost_per_hour=MAX_RATE,
        profit_margin_percent=MAX_RATE,
    )
    row = SheetRow(weight_grams=MAX_WEIGHT_GRAMS, print_hours=MAX_PRINT_HOURS)

    costs = compute_costs(row, config)

    # 1e6 h * 1e9 per kWh * 1e6 kW, then a 1e7x margin
    assert costs.energy_cost == Decimal("1E+21")
    assert costs.final_price > costs.energy_cost
    assert all(value.as_tuple().exponent == -2 for value in costs.model_dump().values())


def test_huge_values_round_to_cents_without_overflow():
    row = SheetRow.model_construct(weight_grams=1e30, print_hours=1)
    costs = compute_costs(row, DEFAULT_PRICING)
    assert costs.material_cost == Decimal("8E+28")
    assert costs.material_cost.as_tuple().exponent == -2


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), 1e30])
def test_non_finite_or_oversized_inputs_are_rejected(value):
    with pytest.raises(ValidationError):
        SheetRow(weight_grams=value, print_hours=1)
    with pytest.raises(ValidationError):
        QuoteRequest(weight_grams=1, print_hours=value)
    with pytest.raises(ValidationError):
        PricingConfig(cost_per_kwh=value)
