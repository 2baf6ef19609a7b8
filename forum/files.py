"""Profile image storage under ``settings.MEDIA_ROOT``."""
import logging
import uuid
from pathlib import Path, PurePath

from fastapi import UploadFile

from forum.config import settings
from forum.exceptions import BadRequestError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def build_image_path(filename: str, folder: str | None = None) -> str:
    """
    Return a unique media-relative path for an uploaded *filename*.

    Any directory part of *filename* (including Windows-style ``C:\\x\\y.png``)
    is discarded.
    """
    name = PurePath(filename.replace("\\", "/")).name
    if Path(name).suffix.lower() not in ALLOWED_IMAGE_EXTENSIONS:
        raise BadRequestError(f"Unsupported image type: '{name}'.")
    return f"{folder or settings.USER_IMAGE_FOLDER}/{uuid.uuid4().hex}{name}"


def _absolute(relative_path: str) -> Path:
    return Path(settings.MEDIA_ROOT) / relative_path.lstrip("/")


async def save_upload(upload: UploadFile, relative_path: str) -> None:
    target = _absolute(relative_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(await upload.read())
    logger.info("Stored upload %r as %s", upload.filename, target)


def delete_image(relative_path: str | None) -> None:
    """Remove a stored image unless it is the shared default one."""
    if not relative_path or relative_path == settings.DEFAULT_USER_IMAGE:
        return
    target = _absolute(relative_path)
    if target.is_file():
        target.unlink()
        logger.info("Deleted image %s", target)
