# storefront/schemas/auth.py
from datetime import datetime

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field


class AuthTokens(SQLModel):
    access: str
    refresh: str | None = None


class UserProfile(SQLModel):
    id: int | None = None
    phone_number: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    is_owner: bool = False
    business_registration: str | None = None
    tax_id: str | None = None
    email_notifications: bool | None = None
    sms_notifications: bool | None = None


class User(SQLModel):
    """
    Account as returned by the API (login, register, profile).
    """

    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    profile: UserProfile = Field(default_factory=UserProfile)

    @property
    def is_owner(self) -> bool:
        return bool(self.profile and self.profile.is_owner)

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.username


class AuthSession(SQLModel):
    """
    Persisted auth slice: who is logged in and with which tokens.
    """

    user: User | None = None
    tokens: AuthTokens | None = None
    is_authenticated: bool = False
    is_owner: bool = False


class LoginResponse(SQLModel):
    access: str
    refresh: str
    user: User | None = None


class TokenRefreshResponse(SQLModel):
    access: str
    refresh: str | None = None


# -------- request payloads --------


class LoginRequest(SQLModel):
    """
    Login by email or username.
    """

    model_config = ConfigDict(extra="forbid")

    username: str | None = None
    email: str | None = None
    password: str = Field(min_length=1)

    @field_validator("username", "email")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class RegistrationDetails(SQLModel):
    model_config = ConfigDict(extra="forbid")

    first_name: str = ""
    last_name: str = ""
    email: str = ""


class RegistrationPhone(SQLModel):
    model_config = ConfigDict(extra="forbid")

    phone: str = ""


class RegistrationPassword(SQLModel):
    model_config = ConfigDict(extra="forbid")

    password: str = ""
    password_confirm: str = ""


class RegisterRequest(SQLModel):
    """
    Body of POST /users/register/.
    """

    username: str
    email: EmailStr
    password: str
    password_confirm: str
    phone_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class ProfileUpdate(SQLModel):
    """
    Partial profile update.
    """

    model_config = ConfigDict(extra="forbid")

    phone_number: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    first_name: str | None = Field(default=None, max_length=150)
    last_name: str | None = Field(default=None, max_length=150)
    email_notifications: bool | None = None
    sms_notifications: bool | None = None


class SessionRead(SQLModel):
    """Auth status for the browser; tokens are never echoed back."""

    is_authenticated: bool
    is_owner: bool
    user: User | None = None
    access_expires_at: datetime | None = None
