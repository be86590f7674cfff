# backend/utils/uploads.py
import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from config import settings
from services.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
URL_PREFIX = "/uploads/"


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_upload(file: Optional[UploadFile]) -> Optional[str]:
    """Store an uploaded photo under a unique name and return its /uploads/ path."""
    if file is None or not file.filename:
        return None
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Invalid file type", field="foto")

    ext = file.filename.rsplit(".", 1)[-1] if "." in file.filename else "bin"
    unique_filename = f"{uuid.uuid4()}.{ext}"
    save_path = upload_dir() / unique_filename
    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    finally:
        file.file.close()
    return f"{URL_PREFIX}{unique_filename}"


def remove_upload(photo_path: Optional[str]) -> None:
    # Only files we stored ourselves; a missing file is not an error
    if not photo_path or not photo_path.startswith(URL_PREFIX):
        return
    path = upload_dir() / Path(photo_path).name
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug("Photo %s already gone", path)
