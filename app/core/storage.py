"""Avatar file storage on local disk; accounts reference stored files by filename."""

import logging
import uuid
from pathlib import Path

from fastapi import UploadFile

from app.core.config import get_settings

logger = logging.getLogger(__name__)

MAX_AVATAR_FILE_BYTES = 5 * 1024 * 1024  # 5 MB
ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


class UploadRejectedError(Exception):
    """Raised when an uploaded file fails the extension or size checks."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AvatarStorage:
    """Save uploads under base_dir with a generated name; delete by that name."""

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def path_for(self, filename: str) -> Path:
        # Stored names are generated by save(); strip any directory part a caller passes.
        return self.base_dir / Path(filename).name

    async def save(self, upload: UploadFile) -> str:
        """Persist an uploaded image and return the stored filename."""
        original = upload.filename or ""
        suffix = Path(original).suffix.lower()
        if suffix not in ALLOWED_IMAGE_EXTENSIONS:
            raise UploadRejectedError(
                f"Uploaded file must be one of: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}."
            )
        content = await upload.read()
        if len(content) > MAX_AVATAR_FILE_BYTES:
            raise UploadRejectedError(
                f"File size must not exceed {MAX_AVATAR_FILE_BYTES // (1024*1024)} MB."
            )
        self.base_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4().hex}{suffix}"
        self.path_for(filename).write_bytes(content)
        logger.info("Stored upload original=%s stored=%s bytes=%s", original, filename, len(content))
        return filename

    def delete(self, filename: str, missing_ok: bool = False) -> None:
        """Remove a stored file. Raises OSError (FileNotFoundError unless missing_ok)."""
        self.path_for(filename).unlink(missing_ok=missing_ok)


def get_avatar_storage() -> AvatarStorage:
    """Dependency: storage rooted at UPLOAD_DIR."""
    return AvatarStorage(get_settings().UPLOAD_DIR)
