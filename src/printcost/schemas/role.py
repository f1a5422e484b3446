from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .base import BaseSchema


class PermissionResponse(BaseSchema):
    id: UUID
    module: str
    action: str
    description: Optional[str] = None


class RoleResponse(BaseSchema):
    id: UUID
    name: str
    description: Optional[str] = None
    is_active: bool
    permissions: list[PermissionResponse] = []


class RoleCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    permission_ids: list[UUID] = []


class RolePermissionsUpdate(BaseModel):
    permission_ids: list[UUID]


class UserRoleUpdate(BaseModel):
    role_id: UUID
