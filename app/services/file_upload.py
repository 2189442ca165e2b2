"""Image uploads stored on local disk and served as static files."""
import uuid
from pathlib import Path
from typing import List

import structlog
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import MarketplaceError

logger = structlog.get_logger(__name__)


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _public_url(filename: str) -> str:
    return f"{settings.UPLOAD_BASE_URL.rstrip('/')}{settings.UPLOAD_URL_PATH}/{filename}"


def _extension(file: UploadFile) -> str:
    suffix = Path(file.filename or "").suffix.lower().lstrip(".")
    return suffix or "jpg"


async def save_images(files: List[UploadFile]) -> List[str]:
    """
    Validate and store uploaded images.

    Returns:
        Public URLs of the stored files, in upload order

    Raises:
        MarketplaceError: if a file is not an allowed image or is too large
    """
    accepted = []
    for file in files:
        if not file.filename:
            continue
        if not (file.content_type or "").startswith("image/"):
            raise MarketplaceError(f"File must be an image: {file.filename}")

        extension = _extension(file)
        if extension not in settings.ALLOWED_EXTENSIONS:
            raise MarketplaceError(f"File type not allowed: {file.filename}")

        content = await file.read()
        if not content:
            continue
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise MarketplaceError(f"File too large: {file.filename}")
        accepted.append((extension, content))

    # nothing is written until every file in the batch has passed
    target = upload_dir()
    urls = []
    for extension, content in accepted:
        filename = f"{uuid.uuid4().hex}.{extension}"
        (target / filename).write_bytes(content)
        urls.append(_public_url(filename))
        logger.info("image_uploaded", filename=filename, size=len(content))

    return urls


def delete_image(url: str) -> bool:
    """Remove a stored file by its public URL. Returns False if it is not there."""
    filename = Path(url.rsplit("/", 1)[-1]).name
    path = upload_dir() / filename
    if not filename or not path.is_file():
        logger.info("image_not_found", filename=filename)
        return False
    path.unlink()
    logger.info("image_deleted", filename=filename)
    return True
