from enum import Enum


class PlanTier(str, Enum):
    """Subscription plan determining sheet quotas."""
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Material(str, Enum):
    """Filament materials a row can be printed in."""
    PLA = "PLA"
    ABS = "ABS"
    PETG = "PETG"
    TPU = "TPU"


class ColumnType(str, Enum):
    TEXT = "text"
    NUMBER = "number"


class AuditAction(str, Enum):
    """Administrative actions recorded in the audit log."""
    UPDATE_USER = "UPDATE_USER"
    DEACTIVATE_USER = "DEACTIVATE_USER"
    UPDATE_USER_ROLE = "UPDATE_USER_ROLE"
    CREATE_ROLE = "CREATE_ROLE"
    UPDATE_ROLE_PERMISSIONS = "UPDATE_ROLE_PERMISSIONS"
    UPDATE_PARAMETERS = "UPDATE_PARAMETERS"
