"""
Child photo storage and the profile-photo rule.

A child has at most one profile photo: a newly uploaded photo always takes
the role, and deleting photos hands it to the most recently uploaded photo
that is left.
"""
from __future__ import annotations
import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from sponsorkit.models import Child, ChildPhoto, utcnow
from sponsorkit.utils.errors import ValidationError
from sponsorkit.utils.validation import clean_str, parse_int

logger = logging.getLogger(__name__)

MAX_BASE64_LENGTH = 7_000_000
MAX_FILE_SIZE = 5 * 1024 * 1024


def decode_image(photo_base64: str) -> bytes:
    data = _strip_data_url(photo_base64)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid base64 image data")


def validate_image_payload(photo_base64: str | None, mime_type: str | None, file_size=None) -> bytes:
    """Return the decoded bytes, raising ``ValidationError`` on bad input."""
    if not photo_base64 or not mime_type:
        raise ValidationError("Photo data and MIME type are required")
    if not str(mime_type).startswith("image/"):
        raise ValidationError("Invalid image MIME type")
    if len(photo_base64) > MAX_BASE64_LENGTH:
        raise ValidationError("Image too large. Maximum size is 5MB")
    size = parse_int(file_size)
    if size is not None and size > MAX_FILE_SIZE:
        raise ValidationError("Image file size exceeds 5MB limit")

    raw = decode_image(photo_base64)
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationError("Uploaded data is not a readable image")
    return raw


def _strip_data_url(photo_base64: str) -> str:
    return photo_base64.split(",", 1)[1] if photo_base64.startswith("data:") else photo_base64


def latest_photo(s: Session, child_id: int) -> ChildPhoto | None:
    stmt = (
        select(ChildPhoto)
        .where(ChildPhoto.child_id == child_id)
        .order_by(ChildPhoto.uploaded_at.desc(), ChildPhoto.id.desc())
        .limit(1)
    )
    return s.execute(stmt).scalar_one_or_none()


def refresh_profile_photo(s: Session, child_id: int) -> ChildPhoto | None:
    """Make the latest photo the only profile photo; touch the child."""
    s.flush()
    latest = latest_photo(s, child_id)
    s.execute(
        update(ChildPhoto)
        .where(ChildPhoto.child_id == child_id)
        .values(is_profile=False)
        .execution_options(synchronize_session="fetch")
    )
    if latest is not None:
        latest.is_profile = True
    child = s.get(Child, child_id)
    if child is not None:
        child.last_profile_update = utcnow()
    s.flush()
    return latest


def add_photo(s: Session, child: Child, payload: dict) -> ChildPhoto:
    photo_base64 = payload.get("photoBase64")
    mime_type = clean_str(payload.get("mimeType"))
    raw = validate_image_payload(photo_base64, mime_type, payload.get("fileSize"))

    photo = ChildPhoto(
        child_id=child.id,
        photo_base64=_strip_data_url(photo_base64),
        mime_type=mime_type,
        file_name=clean_str(payload.get("fileName")),
        file_size=parse_int(payload.get("fileSize")) or len(raw),
        description=clean_str(payload.get("description")),
        uploaded_at=utcnow(),
        is_profile=False,
    )
    s.add(photo)
    refresh_profile_photo(s, child.id)
    logger.info("photo %s added to child %s", photo.id, child.id)
    return photo


def delete_photo(s: Session, photo: ChildPhoto) -> bool:
    """Delete ``photo``; returns whether it was the profile photo."""
    was_profile = photo.is_profile
    child_id = photo.child_id
    s.delete(photo)
    refresh_profile_photo(s, child_id)
    return was_profile
