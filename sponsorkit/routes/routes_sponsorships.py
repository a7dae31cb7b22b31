from flask import Blueprint, jsonify, request
from sqlalchemy import and_, true
from sqlalchemy.orm import selectinload

from sponsorkit.models import Child, Sponsor, Sponsorship
from sponsorkit.services.sponsorship_service import SponsorshipService
from sponsorkit.utils.auth import login_required
from sponsorkit.utils.db import get_session
from sponsorkit.utils.errors import NotFoundError
from sponsorkit.utils.pagination import paginate, parse_page_args
from sponsorkit.utils.validation import parse_bool, parse_datetime, parse_int

bp = Blueprint("sponsorships", __name__, url_prefix="/api/sponsorships")


def _options():
    return (
        selectinload(Sponsorship.sponsor).selectinload(Sponsor.proxy),
        selectinload(Sponsorship.child).selectinload(Child.school),
    )


def _get_or_404(s, sponsorship_id: int) -> Sponsorship:
    sp = s.get(Sponsorship, sponsorship_id)
    if sp is None:
        raise NotFoundError("Sponsorship not found")
    return sp


def _list_predicate(args):
    parts = []
    child_id = parse_int(args.get("childId"))
    if child_id is not None:
        parts.append(Sponsorship.child_id == child_id)
    sponsor_id = parse_int(args.get("sponsorId"))
    if sponsor_id is not None:
        parts.append(Sponsorship.sponsor_id == sponsor_id)
    active = parse_bool(args.get("active"))
    if active is not None:
        parts.append(Sponsorship.is_active.is_(active))
    return and_(*parts) if parts else true()


@bp.get("")
@login_required
def list_sponsorships():
    page, limit = parse_page_args(request.args)
    with get_session() as s:  # type: Session
        rows, pagination = paginate(
            s, Sponsorship, _list_predicate(request.args), page, limit,
            order_by=(Sponsorship.start_date.desc(), Sponsorship.id.desc()),
            options=_options(),
        )
        return jsonify({
            "data": [sp.to_dict(sponsor=True, child=True) for sp in rows],
            "pagination": pagination,
        })


@bp.post("")
@login_required
def create_sponsorship():
    data = request.get_json(silent=True) or {}
    child_id = parse_int(data.get("childId"))
    if child_id is None:
        return jsonify({"error": "Child ID is required"}), 400
    with get_session() as s:  # type: Session
        sp = SponsorshipService.create(s, child_id, data.get("sponsorId"), data)
        s.commit()
        s.refresh(sp)
        return jsonify(sp.to_dict(sponsor=True, child=True)), 201


@bp.put("/<int:sponsorship_id>")
@login_required
def update_sponsorship(sponsorship_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        sp = SponsorshipService.update(s, _get_or_404(s, sponsorship_id), data)
        s.commit()
        s.refresh(sp)
        return jsonify(sp.to_dict(sponsor=True, child=True))


@bp.post("/<int:sponsorship_id>/end")
@login_required
def end_sponsorship(sponsorship_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        sp = SponsorshipService.end(s, _get_or_404(s, sponsorship_id), parse_datetime(data.get("endDate")))
        s.commit()
        s.refresh(sp)
        return jsonify(sp.to_dict(sponsor=True, child=True))
