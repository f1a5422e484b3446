from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from src.printcost.db.session import SessionDep
from src.printcost.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, Token
from src.printcost.services.user_service import user_service

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(register_in: RegisterRequest, db: SessionDep) -> AuthResponse:
    """Create a free account and return it with an access token."""
    return await user_service.register(db, register_in)


@router.post("/login", response_model=AuthResponse)
async def login(login_in: LoginRequest, db: SessionDep) -> AuthResponse:
    """
    Sign in with email and password, or with an OAuth provider identity.

    Raises:
        InvalidCredentials: Unknown account, wrong password or inactive user
    """
    return await user_service.login(db, login_in)


@router.post("/token", response_model=Token)
async def login_form(db: SessionDep, form_data: OAuth2PasswordRequestForm = Depends()) -> Token:
    """OAuth2 password flow used by the interactive API docs."""
    auth = await user_service.login(
        db, LoginRequest(email=form_data.username, password=form_data.password)
    )
    return Token(access_token=auth.access_token, token_type=auth.token_type)
