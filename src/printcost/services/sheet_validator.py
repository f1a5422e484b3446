from dataclasses import dataclass
from typing import Optional, Union

from src.printcost.schemas.enums import PlanTier
from src.printcost.schemas.sheet import BaseData, CustomColumns
from src.printcost.services.plans import get_plan_limits, parse_tier


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None


def validate_sheet(
    tier: Union[str, PlanTier],
    base_data: Optional[BaseData],
    custom_columns: Optional[CustomColumns],
) -> ValidationResult:
    """Check a sheet body against the quotas of `tier`.

    Rows are checked before columns and only the first violation is
    reported. A missing body counts as empty.

    Raises:
        UnknownPlanError: If `tier` is not a defined plan
    """
    plan = parse_tier(tier)
    limits = get_plan_limits(plan)

    row_count = len(base_data.rows) if base_data is not None else 0
    if not limits.unlimited_rows() and row_count > limits.max_rows:
        return ValidationResult(
            ok=False,
            reason=f"Plan {plan.value} allows at most {limits.max_rows} rows",
        )

    column_count = len(custom_columns.columns) if custom_columns is not None else 0
    if not limits.unlimited_columns() and column_count > limits.max_custom_columns:
        return ValidationResult(
            ok=False,
            reason=f"Plan {plan.value} allows at most {limits.max_custom_columns} custom columns",
        )

    return ValidationResult(ok=True)
