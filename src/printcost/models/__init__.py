from .base import Base
from .user import User
from .role import Role, Permission, RolePermission
from .sheet import Sheet
from .audit_log import AuditLog
from .global_parameters import GlobalParameters

__all__ = [
    "Base",
    "User",
    "Role",
    "Permission",
    "RolePermission",
    "Sheet",
    "AuditLog",
    "GlobalParameters",
]
