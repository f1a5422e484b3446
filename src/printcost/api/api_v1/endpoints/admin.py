from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.printcost.core.permissions import AdminUser, PermissionServiceDep, require_permission
from src.printcost.db.session import SessionDep
from src.printcost.models.user import User
from src.printcost.schemas.admin import (
    AuditLogFilters,
    AuditLogPage,
    GlobalParametersResponse,
    GlobalParametersUpdate,
    MetricsResponse,
    PlanInfo,
)
from src.printcost.schemas.enums import AuditAction, PlanTier, UserStatus
from src.printcost.schemas.pricing import FormulaDescription
from src.printcost.schemas.role import (
    PermissionResponse,
    RoleCreate,
    RolePermissionsUpdate,
    RoleResponse,
    UserRoleUpdate,
)
from src.printcost.schemas.user import AdminUserUpdate, UserPage, UserPublic
from src.printcost.services.admin_service import AdminService

router = APIRouter()


def get_admin_service(permission_service: PermissionServiceDep) -> AdminService:
    return AdminService(permission_service)


AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]

# Moderators can read the panel; changes need users.admin
UsersAdmin = Annotated[User, Depends(require_permission("users", "admin"))]


# Users

@router.get("/users", response_model=UserPage)
async def list_users(
    admin: AdminUser,
    db: SessionDep,
    service: AdminServiceDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    plan_tier: Optional[PlanTier] = None,
    status: Optional[UserStatus] = None,
    search: Optional[str] = None,
) -> UserPage:
    """Paginated user listing with per-user sheet counts."""
    return await service.list_users(
        db,
        page=page,
        limit=limit,
        plan_tier=plan_tier.value if plan_tier else None,
        status=status.value if status else None,
        search=search,
    )


@router.put("/users/{user_id}", response_model=UserPublic)
async def update_user(
    user_id: str, user_in: AdminUserUpdate, admin: UsersAdmin, db: SessionDep, service: AdminServiceDep
):
    return await service.update_user(db, admin, user_id, user_in)


@router.delete("/users/{user_id}", response_model=UserPublic)
async def deactivate_user(user_id: str, admin: UsersAdmin, db: SessionDep, service: AdminServiceDep):
    """Deactivate a user. Accounts are kept for their sheets and audit history."""
    return await service.deactivate_user(db, admin, user_id)


@router.put("/users/{user_id}/role", response_model=UserPublic)
async def update_user_role(
    user_id: str, role_in: UserRoleUpdate, admin: UsersAdmin, db: SessionDep, service: AdminServiceDep
):
    return await service.update_user_role(db, admin, user_id, role_in.role_id)


# Roles and permissions

@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(admin: AdminUser, db: SessionDep, service: AdminServiceDep):
    return await service.list_roles(db)


@router.post("/roles", response_model=RoleResponse, status_code=201)
async def create_role(role_in: RoleCreate, admin: UsersAdmin, db: SessionDep, service: AdminServiceDep):
    return await service.create_role(db, admin, role_in)


@router.put("/roles/{role_id}/permissions", response_model=RoleResponse)
async def set_role_permissions(
    role_id: str,
    permissions_in: RolePermissionsUpdate,
    admin: UsersAdmin,
    db: SessionDep,
    service: AdminServiceDep,
):
    """Replace the permissions of a role. Cached permissions of all users are dropped."""
    return await service.set_role_permissions(db, admin, role_id, permissions_in.permission_ids)


@router.get("/permissions", response_model=list[PermissionResponse])
async def list_permissions(admin: AdminUser, db: SessionDep, service: AdminServiceDep):
    return await service.list_permissions(db)


# Global parameters and catalogs

@router.get("/parameters", response_model=GlobalParametersResponse)
async def read_parameters(admin: AdminUser, db: SessionDep, service: AdminServiceDep):
    return await service.get_parameters(db)


@router.put("/parameters", response_model=GlobalParametersResponse)
async def update_parameters(
    params_in: GlobalParametersUpdate, admin: UsersAdmin, db: SessionDep, service: AdminServiceDep
):
    return await service.update_parameters(db, admin, params_in)


@router.get("/plans", response_model=list[PlanInfo])
async def read_plans(admin: AdminUser, service: AdminServiceDep) -> list[PlanInfo]:
    """Plan catalog with quotas. Plans are fixed in code."""
    return service.get_plans()


@router.get("/formulas", response_model=list[FormulaDescription])
async def read_formulas(admin: AdminUser, service: AdminServiceDep) -> list[FormulaDescription]:
    return service.get_formulas()


# Reporting

@router.get("/metrics", response_model=MetricsResponse)
async def read_metrics(
    admin: AdminUser,
    db: SessionDep,
    service: AdminServiceDep,
    period_days: int = Query(default=30, ge=1, le=365),
) -> MetricsResponse:
    return await service.get_metrics(db, period_days)


@router.get("/logs", response_model=AuditLogPage)
async def read_audit_logs(
    admin: AdminUser,
    db: SessionDep,
    service: AdminServiceDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=100, ge=1, le=500),
    action: Optional[AuditAction] = None,
    admin_id: Optional[UUID] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> AuditLogPage:
    filters = AuditLogFilters(action=action, admin_id=admin_id, start=start, end=end)
    return await service.list_audit_logs(db, filters, page=page, limit=limit)
