"""
Module: sponsorkit/routes/routes_sponsors.py
Unified comment style: module docstring + minimal inline notes.
"""
from flask import Blueprint, jsonify, request
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from sponsorkit.models import Child, Sponsor, Sponsorship
from sponsorkit.services.child_filters import SponsorFilters
from sponsorkit.services.sponsor_service import create_sponsor, delete_sponsor, get_sponsor_or_404, update_sponsor
from sponsorkit.utils.auth import login_required
from sponsorkit.utils.db import get_session
from sponsorkit.utils.errors import NotFoundError
from sponsorkit.utils.pagination import count_rows, paginate, parse_page_args

bp = Blueprint("sponsors", __name__, url_prefix="/api/sponsors")


def _options():
    return (
        selectinload(Sponsor.proxy),
        selectinload(Sponsor.sponsorships).selectinload(Sponsorship.child).selectinload(Child.school),
    )


def _load_sponsor(s, sponsor_id: int) -> Sponsor:
    sponsor = s.execute(
        select(Sponsor).where(Sponsor.id == sponsor_id).options(*_options())
    ).scalar_one_or_none()
    if sponsor is None:
        raise NotFoundError("Sponsor not found")
    return sponsor


@bp.get("")
@login_required
def list_sponsors():
    filters = SponsorFilters.from_args(request.args)
    page, limit = parse_page_args(request.args)
    with get_session() as s:  # type: Session
        rows, pagination = paginate(
            s, Sponsor, filters.predicate(), page, limit,
            order_by=(Sponsor.full_name.asc(), Sponsor.id.asc()),
            options=_options(),
        )
        return jsonify({"data": [sp.to_dict(sponsorships="active") for sp in rows], "pagination": pagination})


@bp.get("/statistics")
@login_required
def sponsor_statistics():
    with get_session() as s:  # type: Session
        total = count_rows(s, Sponsor)
        with_proxy = count_rows(s, Sponsor, Sponsor.proxy_id.isnot(None))
        active = count_rows(s, Sponsor, Sponsor.sponsorships.any(Sponsorship.is_active.is_(True)))
        monthly = s.execute(
            select(func.coalesce(func.sum(Sponsorship.monthly_amount), 0)).where(Sponsorship.is_active.is_(True))
        ).scalar_one()
        return jsonify({
            "totalSponsors": total,
            "withProxy": with_proxy,
            "withoutProxy": total - with_proxy,
            "withActiveSponsorships": active,
            "withoutActiveSponsorships": total - active,
            "activeMonthlyTotal": round(float(monthly or 0), 2),
        })


@bp.get("/<int:sponsor_id>")
@login_required
def get_sponsor(sponsor_id: int):
    with get_session() as s:  # type: Session
        return jsonify(_load_sponsor(s, sponsor_id).to_dict(sponsorships="all"))


@bp.post("")
@login_required
def create_sponsor_route():
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        sponsor = create_sponsor(s, data)
        s.commit()
        return jsonify(_load_sponsor(s, sponsor.id).to_dict(sponsorships="active")), 201


@bp.put("/<int:sponsor_id>")
@login_required
def update_sponsor_route(sponsor_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        update_sponsor(s, get_sponsor_or_404(s, sponsor_id), data)
        s.commit()
        return jsonify(_load_sponsor(s, sponsor_id).to_dict(sponsorships="active"))


@bp.delete("/<int:sponsor_id>")
@login_required
def delete_sponsor_route(sponsor_id: int):
    with get_session() as s:  # type: Session
        delete_sponsor(s, get_sponsor_or_404(s, sponsor_id))
        s.commit()
        return jsonify({"message": "Sponsor deleted successfully"})
