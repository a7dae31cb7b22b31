"""
Validation and persistence helpers for sponsors and proxies.

Used by the sponsor/proxy routes and by child creation, which may create a
sponsor (and its proxy) in the same transaction as the child.
"""
from __future__ import annotations
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sponsorkit.models import Proxy, Sponsor, Sponsorship
from sponsorkit.utils.errors import ConflictError, NotFoundError, ValidationError
from sponsorkit.utils.validation import check_email, clean_str, parse_int


def _proxy_by_name(s: Session, name: str, exclude_id: int | None = None) -> Proxy | None:
    stmt = select(Proxy).where(func.lower(Proxy.full_name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Proxy.id != exclude_id)
    return s.execute(stmt.limit(1)).scalar_one_or_none()


def resolve_proxy_id(s: Session, raw) -> int | None:
    if raw in (None, "", 0, "0"):
        return None
    pid = parse_int(raw)
    if pid is None or s.get(Proxy, pid) is None:
        raise ValidationError("Invalid proxy ID")
    return pid


def create_proxy(s: Session, payload: dict) -> Proxy:
    full_name = clean_str(payload.get("fullName"))
    if not full_name:
        raise ValidationError("Proxy full name is required")
    role = clean_str(payload.get("role"))
    if not role:
        raise ValidationError("Proxy role is required")
    email = check_email(payload.get("email"))
    if _proxy_by_name(s, full_name):
        raise ConflictError("A proxy with this name already exists")

    proxy = Proxy(
        full_name=full_name,
        role=role,
        contact=clean_str(payload.get("contact")) or "",
        email=email,
        phone=clean_str(payload.get("phone")),
        description=clean_str(payload.get("description")),
    )
    s.add(proxy)
    s.flush()
    return proxy


def update_proxy(s: Session, proxy: Proxy, payload: dict) -> Proxy:
    if "fullName" in payload:
        full_name = clean_str(payload.get("fullName"))
        if not full_name:
            raise ValidationError("Proxy full name cannot be empty")
        if full_name != proxy.full_name and _proxy_by_name(s, full_name, exclude_id=proxy.id):
            raise ConflictError("A proxy with this name already exists")
        proxy.full_name = full_name
    if "role" in payload:
        role = clean_str(payload.get("role"))
        if not role:
            raise ValidationError("Proxy role cannot be empty")
        proxy.role = role
    if "email" in payload:
        proxy.email = check_email(payload.get("email"))
    if "phone" in payload:
        proxy.phone = clean_str(payload.get("phone"))
    if "contact" in payload:
        proxy.contact = clean_str(payload.get("contact")) or ""
    if "description" in payload:
        proxy.description = clean_str(payload.get("description"))
    s.flush()
    return proxy


def delete_proxy(s: Session, proxy: Proxy) -> None:
    if proxy.sponsors:
        raise ConflictError("Cannot delete proxy with associated sponsors. Remove proxy from sponsors first.")
    s.delete(proxy)


def create_sponsor(s: Session, payload: dict) -> Sponsor:
    """
    Create a sponsor. ``newProxy`` (a proxy payload) may stand in for
    ``proxyId``; the proxy is then created first.
    """
    full_name = clean_str(payload.get("fullName"))
    if not full_name:
        raise ValidationError("Sponsor full name is required")
    email = check_email(payload.get("email"))

    new_proxy = payload.get("newProxy")
    if new_proxy and not isinstance(new_proxy, dict):
        raise ValidationError("newProxy must be an object")
    if new_proxy:
        proxy_id = create_proxy(s, new_proxy).id
    else:
        proxy_id = resolve_proxy_id(s, payload.get("proxyId"))

    sponsor = Sponsor(
        full_name=full_name,
        contact=clean_str(payload.get("contact")) or "",
        email=email,
        phone=clean_str(payload.get("phone")),
        proxy_id=proxy_id,
    )
    s.add(sponsor)
    s.flush()
    return sponsor


def update_sponsor(s: Session, sponsor: Sponsor, payload: dict) -> Sponsor:
    if "fullName" in payload:
        full_name = clean_str(payload.get("fullName"))
        if not full_name:
            raise ValidationError("Sponsor full name cannot be empty")
        sponsor.full_name = full_name
    if "email" in payload:
        sponsor.email = check_email(payload.get("email"))
    if "phone" in payload:
        sponsor.phone = clean_str(payload.get("phone"))
    if "contact" in payload:
        sponsor.contact = clean_str(payload.get("contact")) or ""
    if "proxyId" in payload:
        sponsor.proxy_id = resolve_proxy_id(s, payload.get("proxyId"))
    s.flush()
    return sponsor


def delete_sponsor(s: Session, sponsor: Sponsor) -> None:
    """Ended sponsorships go with the sponsor; active ones block the delete."""
    active = s.execute(
        select(func.count(Sponsorship.id)).where(
            Sponsorship.sponsor_id == sponsor.id, Sponsorship.is_active.is_(True)
        )
    ).scalar_one()
    if active:
        raise ConflictError("Cannot delete sponsor with active sponsorships. End sponsorships first.")
    s.delete(sponsor)


def get_sponsor_or_404(s: Session, sponsor_id: int) -> Sponsor:
    sponsor = s.get(Sponsor, sponsor_id)
    if sponsor is None:
        raise NotFoundError("Sponsor not found")
    return sponsor


def get_proxy_or_404(s: Session, proxy_id: int) -> Proxy:
    proxy = s.get(Proxy, proxy_id)
    if proxy is None:
        raise NotFoundError("Proxy not found")
    return proxy
