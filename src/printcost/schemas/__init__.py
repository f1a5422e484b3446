from .base import BaseSchema, TimestampSchema, IDSchema, BaseResponseSchema, Page
from .enums import PlanTier, UserStatus, Material, ColumnType, AuditAction
from .pricing import PricingConfig, CostBreakdown, QuoteRequest, FormulaDescription
from .sheet import SheetRow, BaseData, CustomColumn, CustomColumns, SheetCreate, SheetUpdate, SheetResponse, SheetSummary, PlanLimits, PlanLimitsResponse
from .user import UserPublic, UserProfile, ProfileUpdate, AdminUserUpdate, AdminUserListItem, UserPage
from .auth import RegisterRequest, LoginRequest, AuthResponse, Token
from .role import PermissionResponse, RoleResponse, RoleCreate, RolePermissionsUpdate, UserRoleUpdate
from .admin import GlobalParametersResponse, GlobalParametersUpdate, PlanInfo, MetricsResponse, AuditLogResponse, AuditLogPage, AuditLogFilters
