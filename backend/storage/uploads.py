from __future__ import annotations

import base64
import binascii
import os
import re
import uuid
from typing import Optional, Tuple

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from errors import ServerError, ValidationError
from .object_store import StorageError, get_storage

MAX_FILE_SIZE = 5 * 1024 * 1024
FILE_TOO_LARGE = "File size too large. Maximum size is 5MB."

ATTACHMENT_EXTENSIONS = ("jpeg", "jpg", "png", "gif", "pdf")
_ATTACHMENT_MIME_RE = re.compile(r"jpeg|jpg|png|gif|pdf")

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
IMAGE_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}

_DATA_URL_RE = re.compile(r"^data:image/([a-z0-9.+-]+);base64,", re.IGNORECASE)


def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


# -------------------------
# Transaction attachments
# -------------------------

def save_attachment(file: FileStorage) -> str:
    """
    Validate and store an uploaded receipt/invoice; returns the public path
    persisted on the transaction.
    """
    filename = secure_filename(file.filename or "")
    ext = _extension(filename)
    if ext not in ATTACHMENT_EXTENSIONS or not _ATTACHMENT_MIME_RE.search(file.mimetype or ""):
        raise ValidationError("Only image files (JPEG, JPG, PNG, GIF) and PDF files are allowed")

    data = file.read(MAX_FILE_SIZE + 1)
    if len(data) > MAX_FILE_SIZE:
        raise ValidationError(FILE_TOO_LARGE)

    key = f"transactions/attachment-{uuid.uuid4().hex}.{ext}"
    try:
        stored = get_storage().upload(key, data, file.mimetype)
    except StorageError as e:
        current_app.logger.error("Attachment upload failed: %s", e)
        raise ServerError("Failed to store attachment") from e
    return stored.url


def remove_stored_file(url: Optional[str]) -> None:
    """Best-effort removal of a file previously returned by this module."""
    if not url:
        return
    storage = get_storage()
    key = storage.key_from_url(url)
    if not key:
        return
    try:
        storage.delete(key)
    except StorageError as e:
        current_app.logger.warning("Could not delete stored file %s: %s", key, e)


# -------------------------
# Profile images
# -------------------------

def is_image_data_url(value) -> bool:
    return isinstance(value, str) and bool(_DATA_URL_RE.match(value))


def decode_image_data_url(value: str) -> Tuple[bytes, str]:
    """Split ``data:image/png;base64,...`` into raw bytes and an extension."""
    match = _DATA_URL_RE.match(value)
    if not match:
        raise ValidationError("Profile picture must be a base64 image data URL")
    ext = match.group(1).lower()
    try:
        data = base64.b64decode(value[match.end():], validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Profile picture is not valid base64 data") from e
    return data, ext


def validate_image(filename: str, size: int) -> None:
    if _extension(filename) not in IMAGE_EXTENSIONS:
        raise ValidationError("Invalid file type. Only JPG, PNG, GIF, and WebP are allowed.")
    if size > MAX_FILE_SIZE:
        raise ValidationError(FILE_TOO_LARGE)


def upload_profile_image(data: bytes, ext: str, user_id: int):
    filename = f"{uuid.uuid4().hex}.{ext}"
    validate_image(filename, len(data))
    key = f"profile-images/{user_id}/{filename}"
    try:
        return get_storage().upload(key, data, IMAGE_CONTENT_TYPES.get(ext, "image/jpeg"))
    except StorageError as e:
        current_app.logger.error("Profile image upload failed for user %s: %s", user_id, e)
        raise ServerError("Failed to upload profile picture") from e


def delete_profile_image(path: Optional[str]) -> None:
    if not path:
        return
    try:
        get_storage().delete(path)
    except StorageError as e:
        current_app.logger.warning("Could not delete profile image %s: %s", path, e)
