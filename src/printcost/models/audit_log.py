from sqlalchemy import JSON, Column, ForeignKey, String, Uuid

from src.printcost.models.base import Base


class AuditLog(Base):
    """Record of an administrative action."""
    __tablename__ = "audit_logs"

    action = Column(String, nullable=False, index=True)
    admin_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    target_id = Column(Uuid, nullable=True)
    details = Column(JSON, nullable=True)
