from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .base import BaseResponseSchema, BaseSchema, Page
from .enums import AuditAction, PlanTier
from .sheet import PlanLimits


class GlobalParametersResponse(BaseResponseSchema):
    cost_per_kg_filament: Decimal
    cost_per_kwh: Decimal
    printer_wattage: Decimal
    cost_per_hour: Decimal
    profit_margin_percent: Decimal
    marketplace_fee_percent: Decimal
    currency: str
    backup_retention_days: int
    support_email: Optional[str] = None


class GlobalParametersUpdate(BaseModel):
    """Partial update of global parameters; unknown keys are rejected."""
    # Amounts fit the Numeric(12, 4) columns
    model_config = {"extra": "forbid", "allow_inf_nan": False}

    cost_per_kg_filament: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=4)
    cost_per_kwh: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=4)
    printer_wattage: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=4)
    cost_per_hour: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=4)
    profit_margin_percent: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=4)
    marketplace_fee_percent: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=4)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    backup_retention_days: Optional[int] = Field(default=None, ge=0)
    support_email: Optional[EmailStr] = None


class PlanInfo(BaseSchema):
    """Catalog entry for a subscription plan."""
    tier: PlanTier
    name: str
    monthly_price: Decimal
    max_sheets: int
    limits: PlanLimits
    support: bool
    reports: bool
    export: bool


class MetricsResponse(BaseSchema):
    total_users: int
    active_users: int
    new_signups: int
    total_sheets: int
    recent_sheets: int
    growth_percent: Decimal
    period_days: int


class AuditLogResponse(BaseResponseSchema):
    action: AuditAction
    admin_id: Optional[UUID] = None
    target_id: Optional[UUID] = None
    details: Optional[dict[str, Any]] = None


class AuditLogPage(Page):
    items: list[AuditLogResponse]


class AuditLogFilters(BaseModel):
    action: Optional[AuditAction] = None
    admin_id: Optional[UUID] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
