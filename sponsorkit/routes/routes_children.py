"""
Module: sponsorkit/routes/routes_children.py
Unified comment style: module docstring + minimal inline notes.
"""
from flask import Blueprint, Response, jsonify, request
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from sponsorkit.models import Child, ChildPhoto, Sponsor, Sponsorship
from sponsorkit.services.child_filters import ChildFilters
from sponsorkit.services.child_import import import_rows, read_csv
from sponsorkit.services.child_service import create_child, get_child_or_404, set_archived, update_child
from sponsorkit.services.child_statistics import build_child_statistics
from sponsorkit.services.photo_service import decode_image
from sponsorkit.services.sponsorship_service import SponsorshipService
from sponsorkit.utils.auth import login_required
from sponsorkit.utils.db import get_session
from sponsorkit.utils.errors import NotFoundError, ValidationError
from sponsorkit.utils.pagination import paginate, parse_page_args

bp = Blueprint("children", __name__, url_prefix="/api/children")


def _detail_options():
    return (
        selectinload(Child.school),
        selectinload(Child.sponsorships).selectinload(Sponsorship.sponsor).selectinload(Sponsor.proxy),
        # metadata only; blobs are fetched by the image endpoints
        selectinload(Child.photos).defer(ChildPhoto.photo_base64),
    )


def _load_child(s, child_id: int) -> Child:
    child = s.execute(
        select(Child).where(Child.id == child_id).options(*_detail_options())
    ).scalar_one_or_none()
    if child is None:
        raise NotFoundError("Child not found")
    return child


@bp.get("")
@login_required
def list_children():
    filters = ChildFilters.from_args(request.args)
    page, limit = parse_page_args(request.args)
    with get_session() as s:  # type: Session
        rows, pagination = paginate(
            s, Child, filters.predicate(), page, limit,
            order_by=(Child.created_at.desc(), Child.id.desc()),
            options=_detail_options(),
        )
        return jsonify({"data": [c.to_dict() for c in rows], "pagination": pagination})


@bp.get("/statistics")
@login_required
def children_statistics():
    filters = ChildFilters.from_args(request.args)
    with get_session() as s:  # type: Session
        rows = s.execute(
            select(Child).where(filters.predicate()).options(selectinload(Child.school))
        ).scalars().all()
        stats = build_child_statistics(rows)
    stats["appliedFilters"] = filters.applied()
    return jsonify(stats)


@bp.get("/<int:child_id>")
@login_required
def get_child(child_id: int):
    with get_session() as s:  # type: Session
        child = _load_child(s, child_id)
        data = child.to_dict()
        data["photos"] = [p.to_dict() for p in child.photos]
        return jsonify(data)


@bp.get("/<int:child_id>/image")
@login_required
def get_child_image(child_id: int):
    with get_session() as s:  # type: Session
        get_child_or_404(s, child_id)
        photo = s.execute(
            select(ChildPhoto).where(ChildPhoto.child_id == child_id, ChildPhoto.is_profile.is_(True)).limit(1)
        ).scalar_one_or_none()
        if photo is None:
            raise NotFoundError("No profile photo found")
        raw = decode_image(photo.photo_base64)
        resp = Response(raw, mimetype=photo.mime_type)
        resp.headers["Cache-Control"] = "private, max-age=3600"
        return resp


@bp.post("")
@login_required
def create_child_route():
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        child = create_child(s, data)
        s.commit()
        return jsonify(_load_child(s, child.id).to_dict()), 201


@bp.put("/<int:child_id>")
@login_required
def update_child_route(child_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        update_child(s, get_child_or_404(s, child_id), data)
        s.commit()
        return jsonify(_load_child(s, child_id).to_dict())


@bp.post("/<int:child_id>/archive")
@login_required
def archive_child(child_id: int):
    with get_session() as s:  # type: Session
        set_archived(s, get_child_or_404(s, child_id), True)
        s.commit()
        return jsonify(_load_child(s, child_id).to_dict())


@bp.post("/<int:child_id>/unarchive")
@login_required
def unarchive_child(child_id: int):
    with get_session() as s:  # type: Session
        set_archived(s, get_child_or_404(s, child_id), False)
        s.commit()
        return jsonify(_load_child(s, child_id).to_dict())


# -----------------------------
# Sponsors of a child
# -----------------------------
@bp.post("/<int:child_id>/sponsors")
@login_required
def attach_sponsor(child_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        sp = SponsorshipService.create(s, child_id, data.get("sponsorId"), data)
        s.commit()
        s.refresh(sp)
        return jsonify(sp.to_dict(sponsor=True, child=True)), 201


@bp.delete("/<int:child_id>/sponsors/<int:sponsor_id>")
@login_required
def detach_sponsor(child_id: int, sponsor_id: int):
    with get_session() as s:  # type: Session
        sp = SponsorshipService.end_for_pair(s, child_id, sponsor_id)
        s.commit()
        s.refresh(sp)
        return jsonify({"message": "Sponsorship ended", "sponsorship": sp.to_dict()})


# -----------------------------
# Spreadsheet import
# -----------------------------
@bp.post("/import")
@login_required
def import_children():
    upload = request.files.get("file")
    if upload is not None:
        try:
            rows = read_csv(upload.read().decode("utf-8"))
        except UnicodeDecodeError:
            raise ValidationError("CSV file must be UTF-8 encoded")
    elif request.mimetype == "text/csv":
        rows = read_csv(request.get_data(as_text=True))
    else:
        data = request.get_json(silent=True) or {}
        rows = data.get("rows") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise ValidationError("Request body must contain a rows list")
    result = import_rows(rows)
    status = 201 if result["created"] else 400
    return jsonify(result), status
