# upleer/routes/account.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.auth import get_current_user
from upleer.dependencies import get_db
from upleer.models.user import User
from upleer.schemas.user import AccountSettings, ProfileUpdate, UserProfileRead
from upleer.services.user_service import UserService

router = APIRouter(prefix="/api", tags=["account"])


@router.get("/auth/user", response_model=UserProfileRead)
async def current_user(user: User = Depends(get_current_user)):
    """The user behind the session cookie."""
    return user


@router.get("/settings", response_model=AccountSettings)
async def get_account_settings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return UserService(db).account_settings(user)


@router.post("/settings/profile")
async def update_profile(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await UserService(db).update_profile(user, data)
    return {
        "message": "Profile updated successfully",
        "user": UserProfileRead.model_validate(updated).model_dump(by_alias=True, mode="json"),
    }
