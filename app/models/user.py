"""ORM model for user accounts, plus the role enum and its authorization policy."""

import enum

from sqlalchemy import Column, DateTime, Integer, String, func

from app.models.base import Base


class Role(str, enum.Enum):
    """Authorization tier attached to an account. Stored as its string value."""

    USER = "user"
    ADMIN = "admin"


def has_role(account_role: str | Role, required: Role) -> bool:
    """True if an account with account_role may use an operation gated on required."""
    try:
        role = Role(account_role)
    except ValueError:
        return False
    return role is required


class User(Base):
    """
    Account created by exchanging an activation token (or by the admin CLI).

    password_hash is bcrypt; the plain password is never stored. avatar is the
    filename returned by AvatarStorage, not a path.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=True)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    avatar = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    reset_password_token = Column(String(255), nullable=True)
    reset_password_expires_at = Column(DateTime(timezone=True), nullable=True)
