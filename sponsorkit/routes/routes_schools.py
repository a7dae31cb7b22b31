from flask import Blueprint, jsonify, request
from sqlalchemy import func, select

from sponsorkit.models import Child, School
from sponsorkit.utils.auth import login_required
from sponsorkit.utils.db import get_session
from sponsorkit.utils.errors import ConflictError, NotFoundError, ValidationError
from sponsorkit.utils.validation import clean_str, parse_bool

bp = Blueprint("schools", __name__, url_prefix="/api/schools")


def _name_taken(s, name: str, exclude_id: int | None = None) -> bool:
    stmt = select(School.id).where(func.lower(School.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(School.id != exclude_id)
    return s.execute(stmt.limit(1)).first() is not None


def _get_or_404(s, sid: int) -> School:
    school = s.get(School, sid)
    if school is None:
        raise NotFoundError("School not found")
    return school


@bp.get("")
@login_required
def list_schools():
    include_inactive = parse_bool(request.args.get("includeInactive")) is True
    with get_session() as s:  # type: Session
        stmt = select(School).order_by(School.name.asc())
        if not include_inactive:
            stmt = stmt.where(School.is_active.is_(True))
        rows = s.execute(stmt).scalars().all()
        return jsonify([x.to_dict() for x in rows])


@bp.get("/<int:sid>")
@login_required
def get_school(sid: int):
    with get_session() as s:  # type: Session
        school = _get_or_404(s, sid)
        data = school.to_dict()
        data["childCount"] = s.execute(
            select(func.count(Child.id)).where(Child.school_id == sid)
        ).scalar_one()
        return jsonify(data)


@bp.post("")
@login_required
def create_school():
    data = request.get_json(silent=True) or {}
    name = clean_str(data.get("name"))
    if not name:
        raise ValidationError("School name is required")
    with get_session() as s:  # type: Session
        if _name_taken(s, name):
            raise ConflictError("A school with this name already exists")
        school = School(name=name, location=clean_str(data.get("location")) or "", is_active=True)
        s.add(school)
        s.commit()
        s.refresh(school)
        return jsonify(school.to_dict()), 201


@bp.put("/<int:sid>")
@login_required
def update_school(sid: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        school = _get_or_404(s, sid)
        if "name" in data:
            name = clean_str(data.get("name"))
            if not name:
                raise ValidationError("School name cannot be empty")
            if _name_taken(s, name, exclude_id=sid):
                raise ConflictError("A school with this name already exists")
            school.name = name
        if "location" in data:
            school.location = clean_str(data.get("location")) or ""
        if "isActive" in data:
            active = parse_bool(data.get("isActive"))
            if active is None:
                raise ValidationError("isActive must be a boolean")
            school.is_active = active
        s.commit()
        s.refresh(school)
        return jsonify(school.to_dict())
