"""
Module: sponsorkit/routes/routes_child_photos.py
Unified comment style: module docstring + minimal inline notes.

Photos are stored as base64 text; GET /<photoId> serves the decoded bytes.
"""
from datetime import timezone

from flask import Blueprint, Response, jsonify, request
from sqlalchemy import select
from sqlalchemy.orm import defer

from sponsorkit.models import ChildPhoto
from sponsorkit.services.child_service import get_child_or_404
from sponsorkit.services.photo_service import add_photo, decode_image, delete_photo
from sponsorkit.utils.auth import login_required
from sponsorkit.utils.db import get_session
from sponsorkit.utils.errors import NotFoundError
from sponsorkit.utils.validation import clean_str, parse_bool

bp = Blueprint("child_photos", __name__, url_prefix="/api/child-photos")


def _get_or_404(s, photo_id: int) -> ChildPhoto:
    photo = s.get(ChildPhoto, photo_id)
    if photo is None:
        raise NotFoundError("Photo not found")
    return photo


def _etag(photo: ChildPhoto) -> str:
    uploaded = photo.uploaded_at
    if uploaded.tzinfo is None:
        uploaded = uploaded.replace(tzinfo=timezone.utc)
    return f"{photo.id}-{int(uploaded.timestamp() * 1000)}"


@bp.get("/child/<int:child_id>")
@login_required
def list_photos(child_id: int):
    include_base64 = parse_bool(request.args.get("includeBase64")) is True
    with get_session() as s:  # type: Session
        get_child_or_404(s, child_id)
        stmt = (
            select(ChildPhoto)
            .where(ChildPhoto.child_id == child_id)
            .order_by(ChildPhoto.uploaded_at.desc(), ChildPhoto.id.desc())
        )
        if not include_base64:
            stmt = stmt.options(defer(ChildPhoto.photo_base64))
        rows = s.execute(stmt).scalars().all()
        return jsonify([p.to_dict(include_base64=include_base64) for p in rows])


@bp.post("/child/<int:child_id>")
@login_required
def upload_photo(child_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        child = get_child_or_404(s, child_id)
        photo = add_photo(s, child, data)
        s.commit()
        s.refresh(photo)
        return jsonify({
            **photo.to_dict(),
            "message": "Photo uploaded successfully and set as profile photo",
        }), 201


@bp.get("/<int:photo_id>")
@login_required
def serve_photo(photo_id: int):
    with get_session() as s:  # type: Session
        photo = _get_or_404(s, photo_id)
        etag = _etag(photo)
        if request.if_none_match and etag in request.if_none_match:
            return Response(status=304)
        raw = decode_image(photo.photo_base64)
        resp = Response(raw, mimetype=photo.mime_type)
        resp.headers["Content-Length"] = str(len(raw))
        resp.headers["Cache-Control"] = "public, max-age=86400"
        resp.set_etag(etag)
        filename = (photo.file_name or f"photo-{photo.id}").replace('"', "")
        resp.headers["Content-Disposition"] = f'inline; filename="{filename}"'
        return resp


@bp.put("/<int:photo_id>")
@login_required
def update_photo(photo_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        photo = _get_or_404(s, photo_id)
        if "description" in data:
            photo.description = clean_str(data.get("description"))
        s.commit()
        s.refresh(photo)
        return jsonify(photo.to_dict())


@bp.delete("/<int:photo_id>")
@login_required
def delete_photo_route(photo_id: int):
    with get_session() as s:  # type: Session
        was_profile = delete_photo(s, _get_or_404(s, photo_id))
        s.commit()
        return jsonify({"message": "Photo deleted successfully", "wasProfilePhoto": was_profile})
