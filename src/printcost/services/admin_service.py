import logging
import math
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.printcost.core.exceptions import (
    EmailAlreadyRegistered,
    PermissionNotFound,
    RoleNotFound,
    UserNotFound,
    ValidationFailure,
)
from src.printcost.core.permissions import PermissionService
from src.printcost.crud.crud_audit_log import audit_log as crud_audit_log
from src.printcost.crud.crud_parameters import global_parameters as crud_parameters
from src.printcost.crud.crud_role import permission as crud_permission
from src.printcost.crud.crud_role import role as crud_role
from src.printcost.crud.crud_sheet import sheet as crud_sheet
from src.printcost.crud.crud_user import user as crud_user
from src.printcost.models.base import utcnow
from src.printcost.models.global_parameters import GlobalParameters
from src.printcost.models.role import Permission, Role
from src.printcost.models.user import User
from src.printcost.schemas.admin import (
    AuditLogFilters,
    AuditLogPage,
    AuditLogResponse,
    GlobalParametersUpdate,
    MetricsResponse,
    PlanInfo,
)
from src.printcost.schemas.enums import AuditAction, UserStatus
from src.printcost.schemas.pricing import FormulaDescription
from src.printcost.schemas.role import RoleCreate
from src.printcost.schemas.user import AdminUserListItem, AdminUserUpdate, UserPage, UserPublic
from src.printcost.services.plans import get_plan_catalog
from src.printcost.services.pricing import FORMULAS
from src.printcost.services.user_service import normalize_email
from src.printcost.utils.validation import parse_uuid


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def growth_percent(new_signups: int, total_users: int) -> Decimal:
    """Signups in the period relative to the users that existed before it.

    Without a previous base (no users before the period) growth is 0.
    """
    previous = total_users - new_signups
    if new_signups <= 0 or previous <= 0:
        return Decimal("0.0")
    growth = Decimal(new_signups) / Decimal(previous) * 100
    return growth.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; aware filter values are converted."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def jsonable(data: dict[str, Any]) -> dict[str, Any]:
    """Render audit details so they fit a JSON column."""
    out = {}
    for key, value in data.items():
        if isinstance(value, (UUID, Decimal)):
            value = str(value)
        out[key] = value
    return out


class AdminService:
    """Administrative operations behind the admin panel.

    Every mutation is recorded in the audit log with the acting admin.
    Permission changes are pushed into the injected `PermissionService`'s
    cache so they apply without waiting for the TTL.
    """

    def __init__(self, permission_service: PermissionService):
        self.permission_service = permission_service
        self.logger = logging.getLogger(__name__)

    async def _get_user(self, db: AsyncSession, user_id: Union[str, UUID]) -> User:
        parsed = user_id if isinstance(user_id, UUID) else parse_uuid(user_id)
        user = await crud_user.get(db, id=parsed) if parsed else None
        if user is None:
            raise UserNotFound(user_id)
        return user

    async def _get_role(self, db: AsyncSession, role_id: UUID) -> Role:
        role = await crud_role.get_with_permissions(db, id=role_id)
        if role is None:
            raise RoleNotFound(role_id)
        return role

    async def _get_permissions(self, db: AsyncSession, permission_ids: list[UUID]) -> list[Permission]:
        wanted = set(permission_ids)
        permissions = await crud_permission.get_many(db, ids=list(wanted))
        missing = wanted - {p.id for p in permissions}
        if missing:
            raise PermissionNotFound(sorted(missing, key=str))
        return permissions

    async def _audit(
        self,
        db: AsyncSession,
        action: AuditAction,
        admin: User,
        target_id: Optional[UUID] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        await crud_audit_log.record(
            db,
            action=action.value,
            admin_id=admin.id,
            target_id=target_id,
            details=jsonable(details) if details else None,
        )
        self.logger.info(f"Admin {admin.id} performed {action.value} on {target_id}")

    # Users

    async def list_users(
        self,
        db: AsyncSession,
        *,
        page: int = 1,
        limit: int = 50,
        plan_tier: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> UserPage:
        rows, total = await crud_user.search(
            db,
            skip=(page - 1) * limit,
            limit=limit,
            plan_tier=plan_tier,
            status=status,
            search=search,
        )
        items = [
            AdminUserListItem(**UserPublic.model_validate(user).model_dump(), sheet_count=count)
            for user, count in rows
        ]
        return UserPage(items=items, total=total, total_pages=total_pages(total, limit), page=page)

    async def update_user(
        self, db: AsyncSession, admin: User, user_id: Union[str, UUID], user_in: AdminUserUpdate
    ) -> User:
        """Apply an administrator's edits to any account.

        Raises:
            UserNotFound: Unknown user
            EmailAlreadyRegistered: Email used by another account
            RoleNotFound: `role_id` does not exist
        """
        user = await self._get_user(db, user_id)
        update_data = user_in.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in update_data:
            email = normalize_email(update_data["email"])
            if await crud_user.email_taken(db, email=email, exclude_id=user.id):
                raise EmailAlreadyRegistered(email)
            update_data["email"] = email
        if "role_id" in update_data:
            await self._get_role(db, update_data["role_id"])
        for key in ("plan_tier", "status"):
            if key in update_data:
                update_data[key] = update_data[key].value

        if not update_data:
            return user

        role_changed = "role_id" in update_data and update_data["role_id"] != user.role_id
        user = await crud_user.update(db, db_obj=user, obj_in=update_data)
        if role_changed or update_data.get("status") == UserStatus.INACTIVE.value:
            self.permission_service.cache.invalidate(user.id)

        await self._audit(db, AuditAction.UPDATE_USER, admin, user.id, update_data)
        return user

    async def update_user_role(
        self, db: AsyncSession, admin: User, user_id: Union[str, UUID], role_id: UUID
    ) -> User:
        user = await self._get_user(db, user_id)
        role = await self._get_role(db, role_id)
        previous_role_id = user.role_id

        user = await crud_user.update(db, db_obj=user, obj_in={"role_id": role.id})
        self.permission_service.cache.invalidate(user.id)

        await self._audit(
            db,
            AuditAction.UPDATE_USER_ROLE,
            admin,
            user.id,
            {"previous_role_id": previous_role_id, "role_id": role.id, "role": role.name},
        )
        return user

    async def deactivate_user(self, db: AsyncSession, admin: User, user_id: Union[str, UUID]) -> User:
        """Mark an account inactive. Accounts are never hard-deleted."""
        user = await self._get_user(db, user_id)
        if user.id == admin.id:
            raise ValidationFailure("Administrators cannot deactivate their own account")

        user = await crud_user.update(db, db_obj=user, obj_in={"status": UserStatus.INACTIVE.value})
        self.permission_service.cache.invalidate(user.id)
        await self._audit(db, AuditAction.DEACTIVATE_USER, admin, user.id, {"email": user.email})
        return user

    # Roles and permissions

    async def list_roles(self, db: AsyncSession) -> list[Role]:
        return await crud_role.get_active(db)

    async def create_role(self, db: AsyncSession, admin: User, role_in: RoleCreate) -> Role:
        if await crud_role.get_by_name(db, name=role_in.name):
            raise ValidationFailure(f"Role '{role_in.name}' already exists")
        permissions = await self._get_permissions(db, role_in.permission_ids)

        role = await crud_role.create_with_permissions(
            db, name=role_in.name, description=role_in.description, permissions=permissions
        )
        await self._audit(
            db,
            AuditAction.CREATE_ROLE,
            admin,
            role.id,
            {"name": role.name, "permissions": sorted(f"{p.module}.{p.action}" for p in permissions)},
        )
        return role

    async def set_role_permissions(
        self, db: AsyncSession, admin: User, role_id: Union[str, UUID], permission_ids: list[UUID]
    ) -> Role:
        """Replace a role's permissions and drop every cached permission set."""
        parsed = role_id if isinstance(role_id, UUID) else parse_uuid(role_id)
        if parsed is None:
            raise RoleNotFound(role_id)
        role = await self._get_role(db, parsed)
        permissions = await self._get_permissions(db, permission_ids)

        role = await crud_role.set_permissions(db, role=role, permissions=permissions)
        # Any user may hold this role, so no single entry can be targeted
        self.permission_service.cache.invalidate_all()

        await self._audit(
            db,
            AuditAction.UPDATE_ROLE_PERMISSIONS,
            admin,
            role.id,
            {"permissions": sorted(f"{p.module}.{p.action}" for p in permissions)},
        )
        return role

    async def list_permissions(self, db: AsyncSession) -> list[Permission]:
        return await crud_permission.get_all_ordered(db)

    # Global parameters

    async def get_parameters(self, db: AsyncSession) -> GlobalParameters:
        return await crud_parameters.get_current(db)

    async def update_parameters(
        self, db: AsyncSession, admin: User, params_in: GlobalParametersUpdate
    ) -> GlobalParameters:
        params = await crud_parameters.get_current(db)
        update_data = params_in.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return params

        params = await crud_parameters.update(db, db_obj=params, obj_in=update_data)
        await self._audit(db, AuditAction.UPDATE_PARAMETERS, admin, params.id, update_data)
        return params

    # Catalogs

    def get_plans(self) -> list[PlanInfo]:
        return get_plan_catalog()

    def get_formulas(self) -> list[FormulaDescription]:
        return list(FORMULAS)

    # Reporting

    async def get_metrics(self, db: AsyncSession, period_days: int = 30) -> MetricsResponse:
        """Usage counters for the last `period_days` days.

        The counts run one after another on the same session; a failing
        query propagates instead of yielding partial figures.
        """
        since = utcnow() - timedelta(days=period_days)

        total_users = await crud_user.count(db)
        active_users = await crud_user.count_active(db)
        new_signups = await crud_user.count_since(db, since=since)
        total_sheets = await crud_sheet.count(db)
        recent_sheets = await crud_sheet.count_since(db, since=since)

        return MetricsResponse(
            total_users=total_users,
            active_users=active_users,
            new_signups=new_signups,
            total_sheets=total_sheets,
            recent_sheets=recent_sheets,
            growth_percent=growth_percent(new_signups, total_users),
            period_days=period_days,
        )

    async def list_audit_logs(
        self, db: AsyncSession, filters: AuditLogFilters, *, page: int = 1, limit: int = 100
    ) -> AuditLogPage:
        logs, total = await crud_audit_log.search(
            db,
            skip=(page - 1) * limit,
            limit=limit,
            action=filters.action.value if filters.action else None,
            admin_id=filters.admin_id,
            start=as_naive_utc(filters.start),
            end=as_naive_utc(filters.end),
        )
        return AuditLogPage(
            items=[AuditLogResponse.model_validate(log) for log in logs],
            total=total,
            total_pages=total_pages(total, limit),
            page=page,
        )
