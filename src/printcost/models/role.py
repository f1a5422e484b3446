from sqlalchemy import Boolean, Column, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from src.printcost.models.base import Base


class Role(Base):
    """Role model grouping permissions (user, moderator, admin, master)."""
    __tablename__ = "roles"

    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    users = relationship("User", back_populates="role")
    role_permissions = relationship(
        "RolePermission", back_populates="role", cascade="all, delete-orphan"
    )
    permissions = relationship(
        "Permission", secondary="role_permissions", back_populates="roles", viewonly=True
    )


class Permission(Base):
    """A `(module, action)` pair, e.g. ("sheets", "create")."""
    __tablename__ = "permissions"
    __table_args__ = (UniqueConstraint("module", "action", name="uq_permissions_module_action"),)

    module = Column(String, nullable=False)
    action = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # Relationships
    role_permissions = relationship("RolePermission", back_populates="permission")
    roles = relationship(
        "Role", secondary="role_permissions", back_populates="permissions", viewonly=True
    )


class RolePermission(Base):
    """Association table for Role-Permission many-to-many relationship."""
    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permissions"),)

    role_id = Column(Uuid, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    permission_id = Column(Uuid, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    role = relationship("Role", back_populates="role_permissions")
    permission = relationship("Permission", back_populates="role_permissions")
