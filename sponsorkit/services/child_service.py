"""
Child write paths: create (optionally with sponsors, a new sponsor and a
first photo), partial update and archival.

Everything runs on the caller's session; the route commits once.
"""
from __future__ import annotations
import logging
from typing import Any

from sqlalchemy.orm import Session

from sponsorkit.models import Child, School, utcnow
from sponsorkit.services.photo_service import add_photo
from sponsorkit.services.sponsor_service import create_sponsor
from sponsorkit.services.sponsorship_service import SponsorshipService
from sponsorkit.services.sponsorship_sync import sync_child_sponsorship_status
from sponsorkit.utils.errors import NotFoundError, ValidationError
from sponsorkit.utils.validation import clean_str, parse_date, parse_int, require_str

logger = logging.getLogger(__name__)

# payload key -> (attribute, message when required and missing)
REQUIRED_FIELDS = [
    ("firstName", "first_name", "First name is required"),
    ("lastName", "last_name", "Last name is required"),
    ("gender", "gender", "Gender is required"),
    ("class", "class_name", "Class is required"),
    ("fatherFullName", "father_full_name", "Father's full name is required"),
    ("motherFullName", "mother_full_name", "Mother's full name is required"),
]

OPTIONAL_FIELDS = [
    ("fatherAddress", "father_address"),
    ("fatherContact", "father_contact"),
    ("motherAddress", "mother_address"),
    ("motherContact", "mother_contact"),
    ("story", "story"),
    ("comment", "comment"),
]


def _resolve_school(s: Session, raw: Any) -> int:
    school_id = parse_int(raw)
    if school_id is None:
        raise ValidationError("School is required")
    if s.get(School, school_id) is None:
        raise ValidationError("Invalid school ID")
    return school_id


def _parse_birth_date(raw: Any):
    if raw in (None, ""):
        raise ValidationError("Date of birth is required")
    born = parse_date(raw)
    if born is None:
        raise ValidationError("Invalid date of birth")
    return born


def get_child_or_404(s: Session, child_id: int) -> Child:
    child = s.get(Child, child_id)
    if child is None:
        raise NotFoundError("Child not found")
    return child


def create_child(s: Session, payload: dict) -> Child:
    """
    Create a child from the dashboard payload.

    Optional extras, all in the same transaction:

    * ``sponsorIds``: existing sponsors to attach
    * ``newSponsor``: a sponsor (and possibly ``newProxy``) to create and attach
    * ``photo``: ``{photoBase64, mimeType, fileName, fileSize, description}``
    """
    fields = {attr: require_str(payload, key, msg) for key, attr, msg in REQUIRED_FIELDS}
    born = _parse_birth_date(payload.get("dateOfBirth"))
    school_id = _resolve_school(s, payload.get("schoolId"))

    now = utcnow()
    child = Child(
        **fields,
        date_of_birth=born,
        school_id=school_id,
        date_entered_register=now,
        last_profile_update=now,
        is_sponsored=False,
        is_archived=False,
    )
    for key, attr in OPTIONAL_FIELDS:
        setattr(child, attr, clean_str(payload.get(key)))
    s.add(child)
    s.flush()

    sponsor_ids = payload.get("sponsorIds") or []
    if not isinstance(sponsor_ids, list):
        raise ValidationError("sponsorIds must be a list")
    new_sponsor = payload.get("newSponsor")
    if new_sponsor and not isinstance(new_sponsor, dict):
        raise ValidationError("newSponsor must be an object")
    if new_sponsor:
        sponsor_ids = [*sponsor_ids, create_sponsor(s, new_sponsor).id]

    for sid in dict.fromkeys(parse_int(x) for x in sponsor_ids):
        if sid is None:
            raise ValidationError("Invalid sponsor ID")
        SponsorshipService.create(s, child.id, sid)

    photo = payload.get("photo")
    if isinstance(photo, dict) and photo.get("photoBase64"):
        add_photo(s, child, photo)

    sync_child_sponsorship_status(s, child.id)
    logger.info("child %s created (sponsors=%d)", child.id, len(sponsor_ids))
    return child


def update_child(s: Session, child: Child, payload: dict) -> Child:
    """Partial update; only keys present in ``payload`` are touched."""
    for key, attr, _msg in REQUIRED_FIELDS:
        if key in payload:
            value = clean_str(payload.get(key))
            if not value:
                raise ValidationError(f"{key} cannot be empty")
            setattr(child, attr, value)
    for key, attr in OPTIONAL_FIELDS:
        if key in payload:
            setattr(child, attr, clean_str(payload.get(key)))
    if "dateOfBirth" in payload:
        child.date_of_birth = _parse_birth_date(payload.get("dateOfBirth"))
    if "schoolId" in payload:
        child.school_id = _resolve_school(s, payload.get("schoolId"))
    child.last_profile_update = utcnow()
    s.flush()
    return child


def set_archived(s: Session, child: Child, archived: bool) -> Child:
    child.is_archived = archived
    child.archived_at = utcnow() if archived else None
    child.last_profile_update = utcnow()
    s.flush()
    return child
