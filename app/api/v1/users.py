"""Account routes: registration, activation, login/logout, profile updates, admin management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from pydantic import EmailStr

from app.api.v1.auth import (
    clear_session_cookie,
    get_account_store,
    get_current_user,
    require_admin,
    set_session_cookie,
)
from app.core.config import get_settings
from app.core.mailer import Mailer, get_mailer
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    USERNAME_PATTERN,
)
from app.core.storage import AvatarStorage, get_avatar_storage
from app.models.user import User
from app.schemas.auth import (
    ActivationRequest,
    LoginRequest,
    RegistrationResponse,
    SessionResponse,
)
from app.schemas.user import (
    ChangePasswordRequest,
    MessageResponse,
    UpdateProfileRequest,
    UserPublic,
    UserResponse,
    UsersListResponse,
)
from app.services import accounts, registration
from app.services.account_store import AccountStore

logger = logging.getLogger(__name__)
router = APIRouter()

StoreDep = Annotated[AccountStore, Depends(get_account_store)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]


@router.post("/create-user", response_model=RegistrationResponse, status_code=201)
async def create_user(
    name: Annotated[str, Form(min_length=1, max_length=255)],
    username: Annotated[
        str, Form(min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, pattern=USERNAME_PATTERN)
    ],
    email: Annotated[EmailStr, Form()],
    password: Annotated[str, Form(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)],
    store: StoreDep,
    mailer: Annotated[Mailer, Depends(get_mailer)],
    storage: Annotated[AvatarStorage, Depends(get_avatar_storage)],
    file: Annotated[UploadFile | None, File()] = None,
) -> RegistrationResponse:
    """
    Start registration: email an activation link carrying the pending account.
    The account is created only when the link's token is posted to /activation.
    """
    sent_to = await registration.register(
        store,
        mailer,
        storage,
        get_settings(),
        name=name,
        username=username,
        email=email,
        password=password,
        upload=file,
    )
    return RegistrationResponse(
        message=f"Please check your email: {sent_to} to activate your account!"
    )


@router.post("/activation", response_model=SessionResponse, status_code=201)
def activate_user(
    body: ActivationRequest,
    response: Response,
    store: StoreDep,
) -> SessionResponse:
    """Exchange an activation token for a new account and a session."""
    user, token = registration.activate(store, body.activation_token)
    set_session_cookie(response, token)
    return SessionResponse(user=UserPublic.model_validate(user), token=token)


@router.post("/login-user", response_model=SessionResponse, status_code=201)
def login_user(
    body: LoginRequest,
    response: Response,
    store: StoreDep,
) -> SessionResponse:
    user, token = accounts.login(store, body.username_or_email, body.password)
    set_session_cookie(response, token)
    return SessionResponse(user=UserPublic.model_validate(user), token=token)


@router.get("/getuser", response_model=UserResponse)
def get_user(current_user: CurrentUserDep) -> UserResponse:
    return UserResponse(user=UserPublic.model_validate(current_user))


@router.get("/logout", response_model=MessageResponse, status_code=201)
def logout(response: Response) -> MessageResponse:
    clear_session_cookie(response)
    return MessageResponse(message="Log out successful!")


@router.put("/update-user-info", response_model=UserResponse, status_code=201)
def update_user_info(
    body: UpdateProfileRequest,
    current_user: CurrentUserDep,
    store: StoreDep,
) -> UserResponse:
    """Update name, email and phone number; the current password must be supplied."""
    user = accounts.update_profile(
        store,
        current_user,
        name=body.name,
        email=body.email,
        phone_number=body.phone_number,
        password=body.password,
    )
    return UserResponse(user=UserPublic.model_validate(user))


@router.put("/update-avatar", response_model=UserResponse)
async def update_avatar(
    current_user: CurrentUserDep,
    store: StoreDep,
    storage: Annotated[AvatarStorage, Depends(get_avatar_storage)],
    image: Annotated[UploadFile | None, File()] = None,
) -> UserResponse:
    user = await accounts.update_avatar(store, storage, current_user, image)
    return UserResponse(user=UserPublic.model_validate(user))


@router.put("/update-user-addresses", response_model=UserResponse)
def update_user_addresses(current_user: CurrentUserDep) -> UserResponse:
    """Placeholder: addresses are not stored; only checks the account exists."""
    return UserResponse(user=UserPublic.model_validate(current_user))


@router.delete("/delete-user-address/{address_id}", response_model=UserResponse)
def delete_user_address(address_id: str, current_user: CurrentUserDep) -> UserResponse:
    """Placeholder: addresses are not stored; only checks the account exists."""
    return UserResponse(user=UserPublic.model_validate(current_user))


@router.put("/update-user-password", response_model=MessageResponse)
def update_user_password(
    body: ChangePasswordRequest,
    current_user: CurrentUserDep,
    store: StoreDep,
) -> MessageResponse:
    accounts.change_password(
        store,
        current_user,
        old_password=body.old_password,
        new_password=body.new_password,
        confirm_password=body.confirm_password,
    )
    return MessageResponse(message="Password updated successfully!")


@router.get("/user-info/{user_id}", response_model=UserResponse, status_code=201)
def user_info(user_id: int, store: StoreDep) -> UserResponse:
    """Public lookup of an account by id."""
    user = accounts.get_account(store, user_id)
    return UserResponse(user=UserPublic.model_validate(user))


@router.get("/admin-all-users", response_model=UsersListResponse, status_code=201)
def admin_all_users(
    _admin: Annotated[User, Depends(require_admin)],
    store: StoreDep,
) -> UsersListResponse:
    """List all accounts, newest first (admin only)."""
    users = accounts.list_accounts(store)
    return UsersListResponse(users=[UserPublic.model_validate(u) for u in users])


@router.delete("/delete-user/{user_id}", response_model=MessageResponse, status_code=201)
def delete_user(
    user_id: int,
    admin: Annotated[User, Depends(require_admin)],
    store: StoreDep,
) -> MessageResponse:
    accounts.delete_account(store, user_id)
    logger.info("Admin deleted account", extra={"admin_id": admin.id, "user_id": user_id})
    return MessageResponse(message="User deleted successfully!")
