import logging
import threading
import time
from dataclasses import dataclass
from typing import Annotated, Callable, Dict, FrozenSet, NamedTuple, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.printcost.api.auth_deps import get_current_user
from src.printcost.core.config import settings
from src.printcost.crud.crud_user import user as crud_user
from src.printcost.db.session import SessionDep
from src.printcost.models.user import User

logger = logging.getLogger(__name__)


class PermissionKey(NamedTuple):
    """A permission as a `(module, action)` pair."""
    module: str
    action: str

    def __str__(self) -> str:
        return f"{self.module}.{self.action}"


SYSTEM_READ = PermissionKey("system", "read")
USERS_ADMIN = PermissionKey("users", "admin")
SHEETS_ADMIN = PermissionKey("sheets", "admin")

# Holding any of these grants access to the admin panel
ADMIN_PERMISSIONS: FrozenSet[PermissionKey] = frozenset({SYSTEM_READ, USERS_ADMIN, SHEETS_ADMIN})

PermissionSet = FrozenSet[PermissionKey]


@dataclass(frozen=True)
class _CacheEntry:
    permissions: PermissionSet
    cached_at: float


class PermissionCache:
    """In-process map from user id to resolved permissions with a TTL.

    Entries are dropped lazily when read after `ttl_seconds`. A revoked
    permission stays visible until then unless `invalidate` is called.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[UUID, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, user_id: UUID) -> Optional[PermissionSet]:
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            if self._clock() - entry.cached_at >= self.ttl_seconds:
                del self._entries[user_id]
                return None
            return entry.permissions

    def set(self, user_id: UUID, permissions: PermissionSet) -> None:
        with self._lock:
            self._entries[user_id] = _CacheEntry(frozenset(permissions), self._clock())

    def invalidate(self, user_id: UUID) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class PermissionService:
    """Resolves users to permission sets through a `PermissionCache`."""

    def __init__(self, cache: PermissionCache):
        self.cache = cache

    async def get_permissions(self, db: AsyncSession, user_id: UUID) -> PermissionSet:
        """Permissions granted by the user's role.

        Read-through: a fresh cache entry is returned as is, otherwise the
        User -> Role -> Permission chain is loaded and cached.
        """
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        user = await crud_user.get_with_permissions(db, id=user_id)
        if user is None or user.role is None:
            logger.info(f"User {user_id} has no role, no permissions granted")
            permissions: PermissionSet = frozenset()
        else:
            permissions = frozenset(
                PermissionKey(p.module, p.action) for p in user.role.permissions
            )
            logger.debug(f"Resolved permissions for user {user_id}: {sorted(map(str, permissions))}")

        self.cache.set(user_id, permissions)
        return permissions

    async def has_permission(self, db: AsyncSession, user_id: UUID, key: PermissionKey) -> bool:
        return key in await self.get_permissions(db, user_id)

    async def has_admin_access(self, db: AsyncSession, user_id: UUID) -> bool:
        return not ADMIN_PERMISSIONS.isdisjoint(await self.get_permissions(db, user_id))


def build_permission_service() -> PermissionService:
    """Composition root helper used by `create_app`."""
    return PermissionService(PermissionCache(ttl_seconds=settings.PERMISSION_CACHE_TTL_SECONDS))


def get_permission_service(request: Request) -> PermissionService:
    return request.app.state.permission_service


PermissionServiceDep = Annotated[PermissionService, Depends(get_permission_service)]


def require_permission(module: str, action: str):
    """Dependency factory requiring a specific permission for an endpoint."""
    key = PermissionKey(module, action)

    async def permission_dependency(
        current_user: Annotated[User, Depends(get_current_user)],
        permission_service: PermissionServiceDep,
        db: SessionDep,
    ) -> User:
        if not await permission_service.has_permission(db, current_user.id, key):
            logger.warning(f"User {current_user.id} denied, missing permission {key}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied, requires {key}"
            )
        return current_user

    return permission_dependency


async def require_admin_access(
    current_user: Annotated[User, Depends(get_current_user)],
    permission_service: PermissionServiceDep,
    db: SessionDep,
) -> User:
    """Dependency allowing only users with an admin permission."""
    if not await permission_service.has_admin_access(db, current_user.id):
        logger.warning(f"User {current_user.id} denied admin access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )
    return current_user


AdminUser = Annotated[User, Depends(require_admin_access)]
