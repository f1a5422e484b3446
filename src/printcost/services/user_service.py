import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.printcost.core.config import settings
from src.printcost.core.exceptions import (
    DefaultRoleMissing,
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidProfileData,
    UserNotFound,
)
from src.printcost.core.security import create_access_token, get_password_hash, verify_password
from src.printcost.crud.crud_role import role as crud_role
from src.printcost.crud.crud_sheet import sheet as crud_sheet
from src.printcost.crud.crud_user import user as crud_user
from src.printcost.models.base import utcnow
from src.printcost.models.user import User
from src.printcost.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from src.printcost.schemas.enums import PlanTier, UserStatus
from src.printcost.schemas.sheet import SheetSummary
from src.printcost.schemas.user import ProfileUpdate, UserProfile, UserPublic

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            user=UserPublic.model_validate(user),
            access_token=create_access_token(user.id),
        )

    def _check_password(self, password: str) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidProfileData(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

    async def register(self, db: AsyncSession, register_in: RegisterRequest) -> AuthResponse:
        """Create a free-tier account with the default role and sign it in.

        Raises:
            InvalidProfileData: If the password is too short
            EmailAlreadyRegistered: If the email is in use
            DefaultRoleMissing: If roles were never seeded
        """
        self._check_password(register_in.password)
        email = normalize_email(register_in.email)
        if await crud_user.email_taken(db, email=email):
            raise EmailAlreadyRegistered(email)

        default_role = await crud_role.get_by_name(db, name=settings.DEFAULT_ROLE)
        if default_role is None:
            raise DefaultRoleMissing(settings.DEFAULT_ROLE)

        user = await crud_user.create(
            db,
            obj_in={
                "email": email,
                "name": register_in.name.strip(),
                "password_hash": get_password_hash(register_in.password),
                "plan_tier": PlanTier.FREE.value,
                "status": UserStatus.ACTIVE.value,
                "role_id": default_role.id,
                "last_login_at": utcnow(),
            },
        )
        self.logger.info(f"Registered user {user.id}")
        return self._auth_response(user)

    async def login(self, db: AsyncSession, login_in: LoginRequest) -> AuthResponse:
        """Sign in with a password or a known OAuth identity.

        Unknown accounts, wrong passwords and inactive accounts all fail the
        same way so callers cannot probe which emails exist.
        """
        if login_in.email and login_in.password:
            user = await crud_user.get_by_email(db, email=normalize_email(login_in.email))
            if user is None or not user.password_hash:
                raise InvalidCredentials("Unknown email or password login not enabled")
            if not verify_password(login_in.password, user.password_hash):
                raise InvalidCredentials(f"Wrong password for user {user.id}")
        else:
            user = await crud_user.get_by_oauth(
                db, provider=login_in.oauth_provider, provider_id=login_in.oauth_provider_id
            )
            if user is None:
                raise InvalidCredentials(f"Unknown {login_in.oauth_provider} identity")

        if not user.is_active:
            raise InvalidCredentials(f"User {user.id} is inactive")

        user = await crud_user.update(db, db_obj=user, obj_in={"last_login_at": utcnow()})
        self.logger.info(f"User {user.id} logged in")
        return self._auth_response(user)

    async def get_profile(self, db: AsyncSession, user_id: UUID) -> UserProfile:
        user = await crud_user.get(db, id=user_id)
        if user is None:
            raise UserNotFound(user_id)
        sheets = await crud_sheet.get_by_owner(db, owner_id=user_id)
        # Built from UserPublic so the lazy `sheets` relationship is never touched
        return UserProfile(
            **UserPublic.model_validate(user).model_dump(),
            sheets=[SheetSummary.model_validate(s) for s in sheets],
        )

    async def update_profile(self, db: AsyncSession, user: User, profile_in: ProfileUpdate) -> User:
        """Change name, email or password of the signed-in user.

        Plan tier, status and role are not self-service.
        """
        update_data = profile_in.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in update_data:
            email = normalize_email(update_data["email"])
            if await crud_user.email_taken(db, email=email, exclude_id=user.id):
                raise EmailAlreadyRegistered(email)
            update_data["email"] = email
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
        if "password" in update_data:
            password = update_data.pop("password")
            self._check_password(password)
            update_data["password_hash"] = get_password_hash(password)

        if not update_data:
            return user
        user = await crud_user.update(db, db_obj=user, obj_in=update_data)
        self.logger.info(f"User {user.id} updated profile fields {sorted(update_data)}")
        return user


user_service = UserService()
