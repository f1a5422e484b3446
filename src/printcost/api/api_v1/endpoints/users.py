from fastapi import APIRouter

from src.printcost.api.auth_deps import CurrentUser
from src.printcost.db.session import SessionDep
from src.printcost.schemas.user import ProfileUpdate, UserProfile, UserPublic
from src.printcost.services.user_service import user_service

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def read_user_me(current_user: CurrentUser, db: SessionDep) -> UserProfile:
    """Get current user with a summary of their sheets."""
    return await user_service.get_profile(db, current_user.id)


@router.put("/me", response_model=UserPublic)
async def update_user_me(profile_in: ProfileUpdate, current_user: CurrentUser, db: SessionDep):
    """Update name, email or password of the current user."""
    return await user_service.update_profile(db, current_user, profile_in)
