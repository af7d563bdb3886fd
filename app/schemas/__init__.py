"""Pydantic request/response schemas."""

from app.schemas.auth import (
    ActivationRequest,
    LoginRequest,
    RegistrationResponse,
    SessionResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.user import (
    ChangePasswordRequest,
    MessageResponse,
    UpdateProfileRequest,
    UserPublic,
    UserResponse,
    UsersListResponse,
)

__all__ = [
    "ActivationRequest",
    "ChangePasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegistrationResponse",
    "SessionResponse",
    "UpdateProfileRequest",
    "UserPublic",
    "UserResponse",
    "UsersListResponse",
]
