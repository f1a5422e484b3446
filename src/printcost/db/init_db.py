import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from yaml import safe_load

from src.printcost.core.config import settings
from src.printcost.core.security import get_password_hash
from src.printcost.crud.crud_parameters import global_parameters as crud_parameters
from src.printcost.crud.crud_role import permission as crud_permission
from src.printcost.crud.crud_role import role as crud_role
from src.printcost.crud.crud_user import user as crud_user
from src.printcost.db.session import AsyncSessionLocal
from src.printcost.models.role import Permission, Role, RolePermission
from src.printcost.schemas.enums import PlanTier

logger = logging.getLogger(__name__)

ALL_PERMISSIONS = "all"
PERMISSION_FIELDS = {"module", "action", "description"}


def load_roles_file(path: Optional[str] = None) -> dict:
    """Read the roles definition, looking in the working directory then the repo root."""
    name = path or settings.ROLES_FILE
    possible_paths = [
        Path(name),
        Path(__file__).resolve().parents[3] / name,
    ]
    for candidate in possible_paths:
        if candidate.exists():
            logger.info(f"Loading roles from: {candidate}")
            with candidate.open("r") as f:
                return safe_load(f) or {}
    raise FileNotFoundError(f"{name} not found in any of these paths: {possible_paths}")


async def _create_permissions(db: AsyncSession, definitions: list[dict]) -> dict[str, Permission]:
    """Create missing permissions; returns all of them keyed by `module.action`."""
    permissions = {}
    for item in definitions:
        key = f"{item['module']}.{item['action']}"
        unexpected = set(item) - PERMISSION_FIELDS
        if unexpected:
            raise ValueError(f"Permission {key} has unknown fields: {sorted(unexpected)}")
        existing = await crud_permission.get_by_key(db, module=item["module"], action=item["action"])
        if existing:
            logger.info(f"Permission already exists: {key} - skipping")
            permissions[key] = existing
            continue
        permissions[key] = await crud_permission.create(db, obj_in=item)
        logger.info(f"Created permission: {key}")
    return permissions


async def _create_roles(db: AsyncSession, definitions: list[dict], permissions: dict[str, Permission]) -> None:
    """Create missing roles with their permissions.

    Existing roles are left untouched so edits made in the admin panel
    survive a reseed.
    """
    for item in definitions:
        wanted = item.get("permissions") or []
        if wanted == ALL_PERMISSIONS:
            wanted = list(permissions)
        unknown = [key for key in wanted if key not in permissions]
        if unknown:
            raise ValueError(f"Role '{item['name']}' references unknown permissions: {unknown}")

        role = await crud_role.get_by_name(db, name=item["name"])
        if role is None:
            role = Role(name=item["name"], description=item.get("description"))
            role.role_permissions = [RolePermission(permission=permissions[key]) for key in wanted]
            db.add(role)
            await db.commit()
            logger.info(f"Created role: {item['name']} with {len(wanted)} permissions")
        else:
            logger.info(f"Role already exists: {item['name']} - skipping")


async def _create_admin_user(db: AsyncSession) -> None:
    """Create the first master account from ADMIN_EMAIL / ADMIN_PASSWORD, if set."""
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.info("ADMIN_EMAIL / ADMIN_PASSWORD not set - skipping admin user")
        return

    email = email.strip().lower()
    if await crud_user.get_by_email(db, email=email):
        logger.info(f"User already exists: {email} - skipping")
        return

    master = await crud_role.get_by_name(db, name="master")
    await crud_user.create(
        db,
        obj_in={
            "email": email,
            "name": os.getenv("ADMIN_NAME", "Administrator"),
            "password_hash": get_password_hash(password),
            "plan_tier": PlanTier.PREMIUM.value,
            "role_id": master.id if master else None,
        },
    )
    logger.info(f"Created admin user: {email}")


async def seed(db: AsyncSession, roles_file: Optional[str] = None, with_admin: bool = True) -> None:
    """Seed permissions, roles, global parameters and optionally the admin user."""
    definitions = load_roles_file(roles_file)
    permissions = await _create_permissions(db, definitions.get("permissions", []))
    await _create_roles(db, definitions.get("roles", []), permissions)
    await crud_parameters.get_current(db)
    if with_admin:
        await _create_admin_user(db)


async def init_db() -> None:
    """Initialize the database with seed data."""
    async with AsyncSessionLocal() as db:
        try:
            await seed(db)
            logger.info("Database initialization completed successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            await db.rollback()
            raise


def main() -> None:
    """Main function to run database initialization."""
    try:
        asyncio.run(init_db())
        print("Database initialization completed successfully!")
    except Exception as e:
        print(f"Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
