from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from .user import UserPublic


class RegisterRequest(BaseModel):
    """Request schema for user registration."""
    name: str = Field(min_length=1)
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    """Either email + password or an OAuth provider identity."""
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    oauth_provider: Optional[str] = None
    oauth_provider_id: Optional[str] = None

    @model_validator(mode="after")
    def require_credentials(self) -> "LoginRequest":
        has_password = bool(self.email and self.password)
        has_oauth = bool(self.oauth_provider and self.oauth_provider_id)
        if not (has_password or has_oauth):
            raise ValueError("Provide email and password, or oauth_provider and oauth_provider_id")
        return self


class AuthResponse(BaseModel):
    """Authenticated user plus a bearer token."""
    user: UserPublic
    access_token: str
    token_type: str = "bearer"


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
