"""Authentication dependencies for FastAPI endpoints."""
import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from src.printcost.core.config import settings
from src.printcost.core.security import decode_access_token
from src.printcost.crud.crud_user import user as crud_user
from src.printcost.db.session import SessionDep
from src.printcost.models.user import User

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    db: SessionDep,
    token: str = Depends(oauth2_scheme),
) -> User:
    """Resolve the bearer token to an active user."""
    try:
        user_id = UUID(decode_access_token(token))
    except (JWTError, ValueError) as e:
        logger.warning(f"Rejected token: {str(e)}")
        raise credentials_exception

    user = await crud_user.get(db, id=user_id)
    if not user:
        logger.error(f"Token subject {user_id} does not match any user")
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user


# Type aliases for dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
