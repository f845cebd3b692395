# upleer/schemas/user.py
"""
Account schemas for the logged-in author: profile and settings page.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from upleer.schemas.base import BaseSchema


class UserProfileRead(BaseSchema):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseSchema):
    """Fields left out (or null) keep their current value."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None

    @field_validator("first_name", "last_name", "phone", "profile_image", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _email(cls, v):
        if v is None:
            return v
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("must be a valid email address")
        return v


class BankingSettings(BaseSchema):
    bank_name: str = ""
    account_type: str = "corrente"
    agency: str = ""
    account: str = ""
    account_digit: str = ""
    cpf: str = ""
    holder_name: str = ""


class NotificationSettings(BaseSchema):
    email_sales: bool = True
    email_marketing: bool = False
    email_system: bool = True
    push_notifications: bool = True


class AccountSettings(BaseSchema):
    phone: str = ""
    bio: str = ""
    website: str = ""
    banking: BankingSettings = Field(default_factory=BankingSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
