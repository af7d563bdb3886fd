"""Core app configuration, database, and external collaborators (mail, file storage)."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.mailer import get_mailer
from app.core.storage import get_avatar_storage

__all__ = ["get_settings", "settings", "get_db", "get_mailer", "get_avatar_storage"]
