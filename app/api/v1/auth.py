"""Session cookie handling and auth dependencies (get_current_user, require_role, require_admin)."""

from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import Cookie, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.security import decode_access_token
from app.models.user import Role, User, has_role
from app.services.account_store import AccountStore

SESSION_COOKIE_NAME = "token"

security = HTTPBearer(auto_error=False)


def get_account_store(db: Annotated[Session, Depends(get_db)]) -> AccountStore:
    """Dependency: account store bound to this request's DB session."""
    return AccountStore(db)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def clear_session_cookie(response: Response) -> None:
    """Overwrite the session cookie with an empty value that has already expired."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value="",
        max_age=0,
        expires=0,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    store: Annotated[AccountStore, Depends(get_account_store)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> User:
    """
    Dependency: resolve the session (cookie "token", else Bearer header) to an account.
    A cookie that fails to decode does not shadow a valid Bearer token.
    Raises 401 if missing, invalid, expired, or the account no longer exists.
    """
    candidates = [t for t in (token, credentials.credentials if credentials else None) if t]
    if not candidates:
        raise _unauthorized("Please login to continue")
    payload = None
    for raw in candidates:
        try:
            payload = decode_access_token(raw)
            break
        except jwt.PyJWTError:
            continue
    if payload is None:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub:
        raise _unauthorized("Invalid token payload")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")
    user = store.get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def require_role(required: Role) -> Callable[[User], User]:
    """Build a dependency that lets through only accounts whose role is `required`. 403 otherwise."""

    def dependency(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if not has_role(current_user.role, required):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{current_user.role} can not access this resource",
            )
        return current_user

    return dependency


require_admin = require_role(Role.ADMIN)
