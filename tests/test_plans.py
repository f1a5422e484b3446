from decimal import Decimal

import pytest

from src.printcost.core.exceptions import UnknownPlanError
from src.printcost.schemas.enums import PlanTier
from src.printcost.schemas.sheet import BaseData, CustomColumn, CustomColumns, SheetRow
from src.printcost.services.plans import get_plan_catalog, get_plan_limits, parse_tier
from src.printcost.services.sheet_validator import validate_sheet


def make_body(rows: int = 0, columns: int = 0):
    base_data = BaseData(rows=[SheetRow(item=f"Item {i}") for i in range(rows)])
    custom_columns = CustomColumns(
        columns=[CustomColumn(key=f"col{i}", label=f"Column {i}") for i in range(columns)]
    )
    return base_data, custom_columns


@pytest.mark.parametrize(
    "tier,max_rows,max_columns",
    [("free", 10, 3), ("basic", 50, 10), ("premium", -1, -1)],
)
def test_plan_limits(tier, max_rows, max_columns):
    limits = get_plan_limits(tier)
    assert limits.max_rows == max_rows
    assert limits.max_custom_columns == max_columns


def test_premium_is_unlimited():
    limits = get_plan_limits(PlanTier.PREMIUM)
    assert limits.unlimited_rows()
    assert limits.unlimited_columns()


def test_unknown_tier_is_rejected():
    with pytest.raises(UnknownPlanError):
        parse_tier("enterprise")


def test_plan_catalog():
    catalog = {plan.tier: plan for plan in get_plan_catalog()}
    assert set(catalog) == set(PlanTier)
    assert catalog[PlanTier.FREE].monthly_price == Decimal("0.00")
    assert catalog[PlanTier.BASIC].monthly_price == Decimal("29.90")
    assert catalog[PlanTier.PREMIUM].max_sheets == -1
    assert catalog[PlanTier.BASIC].limits.max_rows == 50


def test_free_plan_at_row_limit_passes():
    base_data, custom_columns = make_body(rows=10, columns=3)
    assert validate_sheet("free", base_data, custom_columns).ok


def test_free_plan_over_row_limit_fails():
    base_data, custom_columns = make_body(rows=15)
    result = validate_sheet("free", base_data, custom_columns)
    assert not result.ok
    assert "10" in result.reason


def test_column_limit_reported_with_its_own_number():
    base_data, custom_columns = make_body(rows=1, columns=11)
    result = validate_sheet("basic", base_data, custom_columns)
    assert not result.ok
    assert "10 custom columns" in result.reason


def test_rows_are_checked_before_columns():
    base_data, custom_columns = make_body(rows=11, columns=4)
    result = validate_sheet("free", base_data, custom_columns)
    assert result.reason == "Plan free allows at most 10 rows"


def test_premium_accepts_large_sheets():
    base_data, custom_columns = make_body(rows=10000, columns=50)
    assert validate_sheet("premium", base_data, custom_columns).ok


def test_missing_body_counts_as_empty():
    assert validate_sheet("free", None, None).ok


def test_validator_rejects_unknown_tier():
    with pytest.raises(UnknownPlanError):
        validate_sheet("gold", None, None)
