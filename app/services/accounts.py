"""Login, password change, profile and avatar updates, and admin account management."""

import logging

from fastapi import UploadFile

from app.core.security import (
    PASSWORD_MAX_BYTES,
    create_access_token,
    hash_password,
    password_too_long,
    verify_password,
)
from app.core.storage import AvatarStorage, UploadRejectedError
from app.models.user import User
from app.services.account_store import AccountStore, normalize_email
from app.services.errors import (
    AccountConflictError,
    AccountNotFoundError,
    AvatarStorageError,
    InvalidCredentialsError,
    InvalidPasswordError,
    InvalidUploadError,
    PasswordMismatchError,
)

logger = logging.getLogger(__name__)


def issue_session(user: User) -> str:
    """Session token for an account (set as the "token" cookie by the API)."""
    return create_access_token(sub=user.id, role=user.role)


def login(store: AccountStore, username_or_email: str, password: str) -> tuple[User, str]:
    user = store.find_by_username_or_email(username_or_email)
    if user is None:
        raise AccountNotFoundError("User doesn't exist!")
    if not verify_password(password, user.password_hash):
        logger.warning("Failed login", extra={"user_id": user.id})
        raise InvalidCredentialsError()
    return user, issue_session(user)


def get_account(store: AccountStore, account_id: int) -> User:
    user = store.get(account_id)
    if user is None:
        raise AccountNotFoundError()
    return user


def list_accounts(store: AccountStore) -> list[User]:
    """All accounts, most recently created first."""
    return store.list_newest_first()


def delete_account(store: AccountStore, account_id: int) -> None:
    user = get_account(store, account_id)
    store.delete(user)
    logger.info("Account deleted", extra={"user_id": account_id})


def change_password(
    store: AccountStore,
    user: User,
    old_password: str,
    new_password: str,
    confirm_password: str,
) -> None:
    if not verify_password(old_password, user.password_hash):
        raise InvalidCredentialsError("Old password is incorrect!")
    if new_password != confirm_password:
        raise PasswordMismatchError()
    if password_too_long(new_password):
        raise InvalidPasswordError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes.")
    user.password_hash = hash_password(new_password)
    store.save(user)
    logger.info("Password changed", extra={"user_id": user.id})


def update_profile(
    store: AccountStore,
    user: User,
    name: str,
    email: str,
    phone_number: str | None,
    password: str,
) -> User:
    """Apply name/email/phone after the caller confirms with their current password."""
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    email = normalize_email(email)
    if email != user.email and store.find_conflicting(email=email, exclude_id=user.id):
        raise AccountConflictError("Email is already in use")
    user.name = name
    user.email = email
    user.phone_number = phone_number
    return store.save(user)


async def update_avatar(
    store: AccountStore,
    storage: AvatarStorage,
    user: User,
    upload: UploadFile | None,
) -> User:
    """
    Replace the account's avatar file.

    The new file is stored first so a rejected upload leaves the old avatar
    intact. A missing old file is ignored; any other failure to remove it
    aborts the update and removes the new file.
    """
    if upload is None or not upload.filename:
        raise InvalidUploadError("Please upload an image")
    try:
        new_avatar = await storage.save(upload)
    except UploadRejectedError as e:
        raise InvalidUploadError(e.message) from e

    if user.avatar:
        try:
            storage.delete(user.avatar, missing_ok=True)
        except OSError as e:
            storage.delete(new_avatar, missing_ok=True)
            raise AvatarStorageError(f"Could not remove previous avatar: {e!s}") from e

    user.avatar = new_avatar
    return store.save(user)
