from sqlalchemy import JSON, Column, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from src.printcost.models.base import Base


class Sheet(Base):
    """Cost-calculation sheet owned by exactly one user."""
    __tablename__ = "sheets"

    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    base_data = Column(JSON, nullable=False)  # {"rows": [...], "config": {...}}
    custom_columns = Column(JSON, nullable=False)  # {"columns": [...]}

    # Relationships
    owner = relationship("User", back_populates="sheets")
