from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, String

from src.printcost.models.base import Base


class GlobalParameters(Base):
    """Single-row table of system-wide pricing defaults."""
    __tablename__ = "global_parameters"

    cost_per_kg_filament = Column(Numeric(12, 4), nullable=False, default=Decimal("80"))
    cost_per_kwh = Column(Numeric(12, 4), nullable=False, default=Decimal("0.65"))
    printer_wattage = Column(Numeric(12, 4), nullable=False, default=Decimal("200"))
    cost_per_hour = Column(Numeric(12, 4), nullable=False, default=Decimal("50"))
    profit_margin_percent = Column(Numeric(8, 4), nullable=False, default=Decimal("30"))
    marketplace_fee_percent = Column(Numeric(8, 4), nullable=False, default=Decimal("15"))
    currency = Column(String(3), nullable=False, default="BRL")
    backup_retention_days = Column(Integer, nullable=False, default=30)
    support_email = Column(String, nullable=True)
