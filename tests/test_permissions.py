import uuid

from src.printcost.core.permissions import (
    SYSTEM_READ,
    USERS_ADMIN,
    PermissionCache,
    PermissionKey,
    PermissionService,
)
from src.printcost.crud.crud_role import role as crud_role
from src.printcost.crud.crud_user import user as crud_user


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_cache_entry_is_fresh_within_ttl():
    clock = FakeClock()
    cache = PermissionCache(ttl_seconds=300, clock=clock)
    user_id = uuid.uuid4()
    cache.set(user_id, {SYSTEM_READ})

    clock.advance(299)

    assert cache.get(user_id) == frozenset({SYSTEM_READ})


def test_cache_entry_expires_at_ttl():
    clock = FakeClock()
    cache = PermissionCache(ttl_seconds=300, clock=clock)
    user_id = uuid.uuid4()
    cache.set(user_id, {SYSTEM_READ})

    clock.advance(300)

    assert cache.get(user_id) is None
    assert len(cache) == 0


def test_invalidate_drops_one_user():
    cache = PermissionCache()
    kept, dropped = uuid.uuid4(), uuid.uuid4()
    cache.set(kept, {SYSTEM_READ})
    cache.set(dropped, {USERS_ADMIN})

    cache.invalidate(dropped)

    assert cache.get(dropped) is None
    assert cache.get(kept) == frozenset({SYSTEM_READ})


def test_invalidate_all():
    cache = PermissionCache()
    cache.set(uuid.uuid4(), set())
    cache.set(uuid.uuid4(), set())

    cache.invalidate_all()

    assert len(cache) == 0


class RecordingLock:
    def __init__(self):
        self.acquired = 0

    def __enter__(self):
        self.acquired += 1

    def __exit__(self, *exc_info):
        return False


def test_every_accessor_takes_the_lock():
    cache = PermissionCache()
    lock = cache._lock = RecordingLock()
    user_id = uuid.uuid4()

    cache.set(user_id, {SYSTEM_READ})
    cache.get(user_id)
    assert len(cache) == 1
    cache.invalidate(user_id)
    cache.invalidate_all()

    assert lock.acquired == 5


def test_permission_key_renders_dotted():
    assert str(PermissionKey("sheets", "create")) == "sheets.create"


async def test_permissions_resolved_from_role(seeded_db, make_user):
    user = await make_user(role="user")
    service = PermissionService(PermissionCache())

    permissions = await service.get_permissions(seeded_db, user.id)

    assert PermissionKey("sheets", "create") in permissions
    assert SYSTEM_READ not in permissions
    assert not await service.has_admin_access(seeded_db, user.id)


async def test_any_admin_permission_grants_access(seeded_db, make_user):
    moderator = await make_user(email="mod@example.com", role="moderator")
    master = await make_user(email="master@example.com", role="master")
    service = PermissionService(PermissionCache())

    assert await service.has_admin_access(seeded_db, moderator.id)
    assert await service.has_admin_access(seeded_db, master.id)
    assert await service.has_permission(seeded_db, master.id, USERS_ADMIN)
    assert not await service.has_permission(seeded_db, moderator.id, USERS_ADMIN)


async def test_user_without_role_has_no_permissions(seeded_db, make_user):
    user = await make_user(role=None)
    service = PermissionService(PermissionCache())

    assert await service.get_permissions(seeded_db, user.id) == frozenset()


async def test_unknown_user_has_no_permissions(seeded_db):
    service = PermissionService(PermissionCache())
    assert await service.get_permissions(seeded_db, uuid.uuid4()) == frozenset()


async def test_stale_permissions_until_ttl_or_invalidate(seeded_db, make_user):
    clock = FakeClock()
    service = PermissionService(PermissionCache(ttl_seconds=300, clock=clock))
    user = await make_user(role="admin")
    assert await service.has_admin_access(seeded_db, user.id)

    plain_role = await crud_role.get_by_name(seeded_db, name="user")
    await crud_user.update(seeded_db, db_obj=user, obj_in={"role_id": plain_role.id})

    # Still cached
    clock.advance(10)
    assert await service.has_admin_access(seeded_db, user.id)

    service.cache.invalidate(user.id)
    assert not await service.has_admin_access(seeded_db, user.id)


async def test_expired_entry_is_reloaded(seeded_db, make_user):
    clock = FakeClock()
    service = PermissionService(PermissionCache(ttl_seconds=300, clock=clock))
    user = await make_user(role="admin")
    assert await service.has_admin_access(seeded_db, user.id)

    plain_role = await crud_role.get_by_name(seeded_db, name="user")
    await crud_user.update(seeded_db, db_obj=user, obj_in={"role_id": plain_role.id})
    clock.advance(300)

    assert not await service.has_admin_access(seeded_db, user.id)
