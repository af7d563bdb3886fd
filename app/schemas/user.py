"""Schemas for account payloads. No schema here exposes the password hash."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.core.security import PASSWORD_MAX_BYTES, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, password_too_long


class UserPublic(BaseModel):
    """Account as returned to clients (camelCase keys)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    name: str
    username: str
    email: str
    phone_number: str | None = None
    role: str
    avatar: str | None = None
    created_at: datetime | None = None


class UserResponse(BaseModel):
    success: bool = True
    user: UserPublic


class UsersListResponse(BaseModel):
    """Response for GET /admin-all-users (admin only)."""

    success: bool = True
    users: list[UserPublic]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UpdateProfileRequest(BaseModel):
    """New profile values; password confirms the change and is not updated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone_number: str | None = Field(default=None, max_length=32)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    old_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    confirm_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)

    @field_validator("new_password")
    @classmethod
    def validate_new_password_bytes(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(f"must be at most {PASSWORD_MAX_BYTES} bytes")
        return v
