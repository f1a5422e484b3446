from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .base import BaseResponseSchema, Page
from .enums import PlanTier, UserStatus
from .sheet import SheetSummary


class UserPublic(BaseResponseSchema):
    """User fields safe to return to clients."""
    email: EmailStr
    name: Optional[str] = None
    plan_tier: PlanTier
    status: UserStatus
    role_id: Optional[UUID] = None
    oauth_provider: Optional[str] = None
    last_login_at: Optional[datetime] = None


class UserProfile(UserPublic):
    """Current user together with their sheet summaries."""
    sheets: list[SheetSummary] = []


class ProfileUpdate(BaseModel):
    """Schema for users updating their own profile."""
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class AdminUserUpdate(BaseModel):
    """Fields an administrator may change on any account."""
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    plan_tier: Optional[PlanTier] = None
    status: Optional[UserStatus] = None
    role_id: Optional[UUID] = None


class AdminUserListItem(UserPublic):
    sheet_count: int = 0


class UserPage(Page):
    items: list[AdminUserListItem]
