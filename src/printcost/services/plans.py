"""Static plan quotas and the plan catalog shown in the admin panel."""
from decimal import Decimal
from typing import Union

from src.printcost.core.exceptions import UnknownPlanError
from src.printcost.schemas.admin import PlanInfo
from src.printcost.schemas.enums import PlanTier
from src.printcost.schemas.sheet import PlanLimits

UNLIMITED = -1

PLAN_LIMITS: dict[PlanTier, PlanLimits] = {
    PlanTier.FREE: PlanLimits(max_rows=10, max_custom_columns=3),
    PlanTier.BASIC: PlanLimits(max_rows=50, max_custom_columns=10),
    PlanTier.PREMIUM: PlanLimits(max_rows=UNLIMITED, max_custom_columns=UNLIMITED),
}

PLAN_CATALOG: dict[PlanTier, dict] = {
    PlanTier.FREE: {
        "name": "Free",
        "monthly_price": Decimal("0.00"),
        "max_sheets": 3,
        "support": False,
        "reports": False,
        "export": False,
    },
    PlanTier.BASIC: {
        "name": "Basic",
        "monthly_price": Decimal("29.90"),
        "max_sheets": 15,
        "support": True,
        "reports": True,
        "export": True,
    },
    PlanTier.PREMIUM: {
        "name": "Premium",
        "monthly_price": Decimal("59.90"),
        "max_sheets": UNLIMITED,
        "support": True,
        "reports": True,
        "export": True,
    },
}


def parse_tier(tier: Union[str, PlanTier]) -> PlanTier:
    """Coerce a stored tier string into `PlanTier`.

    Raises:
        UnknownPlanError: If the value is not one of the defined tiers
    """
    try:
        return PlanTier(tier)
    except ValueError:
        raise UnknownPlanError(tier) from None


def get_plan_limits(tier: Union[str, PlanTier]) -> PlanLimits:
    """Return the quotas for `tier`."""
    return PLAN_LIMITS[parse_tier(tier)]


def get_plan_catalog() -> list[PlanInfo]:
    return [
        PlanInfo(tier=tier, limits=PLAN_LIMITS[tier], **entry)
        for tier, entry in PLAN_CATALOG.items()
    ]
