from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from src.printcost.models.base import Base
from src.printcost.schemas.enums import PlanTier, UserStatus


class User(Base):
    """Account owning sheets. Never hard-deleted; deactivation flips `status`."""
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("oauth_provider", "oauth_provider_id", name="uq_users_oauth_identity"),
    )

    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    password_hash = Column(String, nullable=True)  # null for OAuth-only accounts
    oauth_provider = Column(String, nullable=True)
    oauth_provider_id = Column(String, nullable=True)
    plan_tier = Column(String, nullable=False, default=PlanTier.FREE.value)
    status = Column(String, nullable=False, default=UserStatus.ACTIVE.value)
    role_id = Column(Uuid, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)
    last_login_at = Column(DateTime, nullable=True)

    # Relationships
    role = relationship("Role", back_populates="users")
    sheets = relationship("Sheet", back_populates="owner")

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
