"""Request/response schemas for login, activation, and session issuance."""

from pydantic import BaseModel, ConfigDict, Field

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.schemas.user import UserPublic


class LoginRequest(BaseModel):
    """Credentials for login; the identifier may be a username or an email."""

    model_config = ConfigDict(populate_by_name=True)

    username_or_email: str = Field(
        ...,
        alias="usernameOrEmail",
        min_length=1,
        max_length=320,
        description="Username or email",
    )
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class ActivationRequest(BaseModel):
    """Token from the activation email link."""

    activation_token: str = Field(..., min_length=1, max_length=8192)


class SessionResponse(BaseModel):
    """Returned after login or activation; the token is also set as the "token" cookie."""

    success: bool = True
    user: UserPublic
    token: str = Field(..., description="Session JWT")


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str
