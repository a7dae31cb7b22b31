from flask import Blueprint, jsonify, request
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from sponsorkit.models import Proxy
from sponsorkit.services.child_filters import build_proxy_predicate
from sponsorkit.services.sponsor_service import create_proxy, delete_proxy, get_proxy_or_404, update_proxy
from sponsorkit.utils.auth import login_required
from sponsorkit.utils.db import get_session
from sponsorkit.utils.errors import NotFoundError
from sponsorkit.utils.pagination import paginate, parse_page_args

bp = Blueprint("proxies", __name__, url_prefix="/api/proxies")


def _load_proxy(s, proxy_id: int) -> Proxy:
    proxy = s.execute(
        select(Proxy).where(Proxy.id == proxy_id).options(selectinload(Proxy.sponsors))
    ).scalar_one_or_none()
    if proxy is None:
        raise NotFoundError("Proxy not found")
    return proxy


@bp.get("")
@login_required
def list_proxies():
    page, limit = parse_page_args(request.args)
    with get_session() as s:  # type: Session
        rows, pagination = paginate(
            s, Proxy, build_proxy_predicate(request.args), page, limit,
            order_by=(Proxy.full_name.asc(), Proxy.id.asc()),
            options=(selectinload(Proxy.sponsors),),
        )
        return jsonify({"data": [p.to_dict(sponsors=True) for p in rows], "pagination": pagination})


@bp.get("/<int:proxy_id>")
@login_required
def get_proxy(proxy_id: int):
    with get_session() as s:  # type: Session
        return jsonify(_load_proxy(s, proxy_id).to_dict(sponsors=True))


@bp.post("")
@login_required
def create_proxy_route():
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        proxy = create_proxy(s, data)
        s.commit()
        return jsonify(_load_proxy(s, proxy.id).to_dict(sponsors=True)), 201


@bp.put("/<int:proxy_id>")
@login_required
def update_proxy_route(proxy_id: int):
    data = request.get_json(silent=True) or {}
    with get_session() as s:  # type: Session
        update_proxy(s, get_proxy_or_404(s, proxy_id), data)
        s.commit()
        return jsonify(_load_proxy(s, proxy_id).to_dict(sponsors=True))


@bp.delete("/<int:proxy_id>")
@login_required
def delete_proxy_route(proxy_id: int):
    with get_session() as s:  # type: Session
        delete_proxy(s, get_proxy_or_404(s, proxy_id))
        s.commit()
        return jsonify({"message": "Proxy deleted successfully"})
