"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.user import Role, User, has_role

__all__ = ["Base", "Role", "User", "has_role"]
