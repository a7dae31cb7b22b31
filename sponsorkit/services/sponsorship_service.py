"""
Sponsorship write paths.

All functions work on the caller's session and leave the commit to the
caller, so the row change and the ``is_sponsored`` recomputation land in
one transaction.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from sponsorkit.models import Child, Sponsor, Sponsorship, utcnow
from sponsorkit.services.sponsorship_sync import sync_child_sponsorship_status
from sponsorkit.utils.errors import ConflictError, NotFoundError, ValidationError
from sponsorkit.utils.validation import clean_str, parse_datetime, parse_float, parse_int


class SponsorshipService:

    @staticmethod
    def find_active(s: Session, child_id: int, sponsor_id: int, exclude_id: int | None = None) -> Sponsorship | None:
        stmt = select(Sponsorship).where(
            Sponsorship.child_id == child_id,
            Sponsorship.sponsor_id == sponsor_id,
            Sponsorship.is_active.is_(True),
        )
        if exclude_id is not None:
            stmt = stmt.where(Sponsorship.id != exclude_id)
        return s.execute(stmt.limit(1)).scalar_one_or_none()

    @staticmethod
    def create(s: Session, child_id: int, sponsor_id: Any, payload: dict | None = None) -> Sponsorship:
        """
        Attach a sponsor to a child.

        Raises ``ConflictError`` when an active sponsorship for the same pair
        already exists; no second row is written in that case.
        """
        payload = payload or {}
        sid = parse_int(sponsor_id)
        if sid is None:
            raise ValidationError("Sponsor ID is required")
        child = s.get(Child, child_id)
        if child is None:
            raise NotFoundError("Child not found")
        sponsor = s.get(Sponsor, sid)
        if sponsor is None:
            raise NotFoundError("Sponsor not found")
        if SponsorshipService.find_active(s, child.id, sponsor.id):
            raise ConflictError("This sponsor already has an active sponsorship with this child")

        amount_raw = payload.get("monthlyAmount")
        amount = parse_float(amount_raw)
        if amount_raw not in (None, "") and amount is None:
            raise ValidationError("Monthly amount must be a number")
        if amount is not None and amount < 0:
            raise ValidationError("Monthly amount cannot be negative")

        sp = Sponsorship(
            child_id=child.id,
            sponsor_id=sponsor.id,
            start_date=parse_datetime(payload.get("startDate")) or utcnow(),
            is_active=True,
            monthly_amount=amount,
            payment_method=clean_str(payload.get("paymentMethod")),
            notes=clean_str(payload.get("notes")),
        )
        s.add(sp)
        sync_child_sponsorship_status(s, child.id)
        return sp

    @staticmethod
    def end(s: Session, sp: Sponsorship, end_date: datetime | None = None) -> Sponsorship:
        if not sp.is_active:
            raise ConflictError("Sponsorship has already ended")
        sp.is_active = False
        sp.end_date = end_date or utcnow()
        sync_child_sponsorship_status(s, sp.child_id)
        return sp

    @staticmethod
    def end_for_pair(s: Session, child_id: int, sponsor_id: int) -> Sponsorship:
        if s.get(Child, child_id) is None:
            raise NotFoundError("Child not found")
        sp = SponsorshipService.find_active(s, child_id, sponsor_id)
        if sp is None:
            raise NotFoundError("Active sponsorship not found")
        return SponsorshipService.end(s, sp)

    @staticmethod
    def update(s: Session, sp: Sponsorship, payload: dict) -> Sponsorship:
        if "monthlyAmount" in payload:
            raw = payload.get("monthlyAmount")
            amount = parse_float(raw)
            if raw not in (None, "") and amount is None:
                raise ValidationError("Monthly amount must be a number")
            if amount is not None and amount < 0:
                raise ValidationError("Monthly amount cannot be negative")
            sp.monthly_amount = amount
        if "paymentMethod" in payload:
            sp.payment_method = clean_str(payload.get("paymentMethod"))
        if "notes" in payload:
            sp.notes = clean_str(payload.get("notes"))
        if "startDate" in payload:
            start = parse_datetime(payload.get("startDate"))
            if start is None:
                raise ValidationError("Invalid start date")
            sp.start_date = start

        if "isActive" in payload:
            active = payload.get("isActive")
            if not isinstance(active, bool):
                raise ValidationError("isActive must be a boolean")
            if active and not sp.is_active:
                if SponsorshipService.find_active(s, sp.child_id, sp.sponsor_id, exclude_id=sp.id):
                    raise ConflictError("This sponsor already has an active sponsorship with this child")
                sp.is_active = True
                sp.end_date = None
            elif not active and sp.is_active:
                sp.is_active = False
                sp.end_date = parse_datetime(payload.get("endDate")) or utcnow()
        elif "endDate" in payload and not sp.is_active:
            sp.end_date = parse_datetime(payload.get("endDate"))

        sync_child_sponsorship_status(s, sp.child_id)
        return sp
