"""Registration and activation: a pending account travels in a signed token until activated."""

import asyncio
import logging
from typing import TYPE_CHECKING

import jwt
from fastapi import UploadFile

from app.core.mailer import Mailer, MailerError
from app.core.security import (
    PASSWORD_MAX_BYTES,
    create_activation_token,
    decode_activation_token,
    hash_password,
    password_too_long,
)
from app.core.storage import AvatarStorage, UploadRejectedError
from app.models.user import Role, User
from app.services.account_store import AccountStore, normalize_email
from app.services.accounts import issue_session
from app.services.errors import (
    AccountConflictError,
    InvalidPasswordError,
    InvalidTokenError,
    InvalidUploadError,
    MailDeliveryError,
)

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

PENDING_FIELDS = ("name", "username", "email", "password")


def build_activation_url(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/activation/{token}"


def _discard_upload(storage: AvatarStorage, filename: str | None) -> None:
    """Best-effort removal of an upload saved for a registration that did not go through."""
    if not filename:
        return
    try:
        storage.delete(filename)
    except OSError as e:
        logger.error("Could not delete upload %s after failed registration: %s", filename, e)


async def register(
    store: AccountStore,
    mailer: Mailer,
    storage: AvatarStorage,
    settings: "Settings",
    name: str,
    username: str,
    email: str,
    password: str,
    upload: UploadFile | None = None,
) -> str:
    """
    Email an activation link for a new account; nothing is written to the users table.

    The upload (if any) is stored first and its filename rides along in the
    token. On conflict or mail failure the stored upload is discarded.
    Returns the email address the link was sent to.
    """
    if password_too_long(password):
        raise InvalidPasswordError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes.")
    email = normalize_email(email)

    avatar: str | None = None
    if upload is not None and upload.filename:
        try:
            avatar = await storage.save(upload)
        except UploadRejectedError as e:
            raise InvalidUploadError(e.message) from e

    if store.find_conflicting(email=email, username=username) is not None:
        _discard_upload(storage, avatar)
        raise AccountConflictError()

    pending = {"name": name, "username": username, "email": email, "password": password}
    if avatar:
        pending["avatar"] = avatar
    token = create_activation_token(pending)
    activation_url = build_activation_url(settings.FRONTEND_URL, token)

    try:
        await asyncio.to_thread(
            mailer.send,
            email,
            "Activate your account",
            f"Hello {name}, please click on the link to activate your account: {activation_url}",
        )
    except MailerError as e:
        logger.error(
            "Activation email failed",
            extra={"username": username, "reason": e.message[:500]},
        )
        _discard_upload(storage, avatar)
        raise MailDeliveryError(e.message) from e

    logger.info("Activation email sent", extra={"username": username})
    return email


def activate(store: AccountStore, activation_token: str) -> tuple[User, str]:
    """Create the account carried by a valid activation token; return it with a session token."""
    try:
        pending = decode_activation_token(activation_token)
    except jwt.PyJWTError as e:
        raise InvalidTokenError() from e
    if not all(isinstance(pending.get(f), str) and pending.get(f) for f in PENDING_FIELDS):
        raise InvalidTokenError()

    # Re-checked here: the same token may be replayed, or two registrations may race.
    if store.find_conflicting(email=pending["email"], username=pending["username"]) is not None:
        raise AccountConflictError()

    user = User(
        name=pending["name"],
        username=pending["username"],
        email=normalize_email(pending["email"]),
        password_hash=hash_password(pending["password"]),
        role=Role.USER.value,
        avatar=pending.get("avatar"),
    )
    user = store.add(user)
    logger.info("Account activated", extra={"user_id": user.id, "username": user.username})
    return user, issue_session(user)
