# upleer/services/user_service.py
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.exceptions import ValidationError
from upleer.models.user import User
from upleer.schemas.user import AccountSettings, ProfileUpdate

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def account_settings(self, user: User) -> AccountSettings:
        """Settings page data. Banking and notification preferences are not stored yet, so defaults are returned."""
        return AccountSettings(phone=user.phone or "")

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        changes = data.model_dump(exclude_none=True)

        if "email" in changes and changes["email"] != (user.email or "").lower():
            taken = await self.db.scalar(
                select(User.id).where(func.lower(User.email) == changes["email"], User.id != user.id)
            )
            if taken is not None:
                raise ValidationError(f"Email {changes['email']} is already in use")

        if "profile_image" in changes:
            changes["profile_image_url"] = changes.pop("profile_image")

        for field, value in changes.items():
            setattr(user, field, value)

        await self.db.commit()
        await self.db.refresh(user)
        logger.info("Profile updated for user %s (%s)", user.id, ", ".join(sorted(changes)) or "no changes")
        return user
