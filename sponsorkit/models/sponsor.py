"""
Module: sponsorkit/models/sponsor.py
Unified comment style: module docstring + minimal inline notes.
"""
from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, List
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, DateTime, Boolean, Numeric, ForeignKey, Index, func
from sponsorkit.utils.db import Base
from .base import utcnow, iso

if TYPE_CHECKING:
    from .child import Child


class Proxy(Base):
    """Middleman through whom sponsors are recruited and contacted."""
    __tablename__ = "proxies"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(128), nullable=False)
    contact: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    sponsors: Mapped[List["Sponsor"]] = relationship("Sponsor", back_populates="proxy", order_by="Sponsor.full_name")

    def to_dict(self, sponsors: bool = False) -> dict:
        data = {
            "id": self.id,
            "fullName": self.full_name,
            "role": self.role,
            "contact": self.contact,
            "email": self.email,
            "phone": self.phone,
            "description": self.description,
            "createdAt": iso(self.created_at),
        }
        if sponsors:
            data["sponsors"] = [s.to_contact() for s in self.sponsors]
            data["sponsorCount"] = len(self.sponsors)
        return data


class Sponsor(Base):
    __tablename__ = "sponsors"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # legacy free-text contact, kept next to the structured email/phone
    contact: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    proxy_id: Mapped[int | None] = mapped_column(ForeignKey("proxies.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    proxy: Mapped["Proxy | None"] = relationship("Proxy", back_populates="sponsors")
    sponsorships: Mapped[List["Sponsorship"]] = relationship(
        "Sponsorship", back_populates="sponsor", cascade="all, delete-orphan",
        order_by="Sponsorship.start_date.desc()",
    )

    @property
    def active_sponsorships(self) -> list["Sponsorship"]:
        return [sp for sp in self.sponsorships if sp.is_active]

    def to_contact(self) -> dict:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "contact": self.contact,
        }

    def to_dict(self, sponsorships: str | None = None) -> dict:
        """``sponsorships`` is ``None``, ``"active"`` or ``"all"``."""
        data = {
            **self.to_contact(),
            "proxyId": self.proxy_id,
            "proxy": self.proxy.to_dict() if self.proxy else None,
            "createdAt": iso(self.created_at),
        }
        if sponsorships:
            rows = self.active_sponsorships if sponsorships == "active" else self.sponsorships
            data["sponsorships"] = [sp.to_dict(child=True) for sp in rows]
        return data


class Sponsorship(Base):
    __tablename__ = "sponsorships"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    child_id: Mapped[int] = mapped_column(ForeignKey("children.id", ondelete="CASCADE"), nullable=False, index=True)
    sponsor_id: Mapped[int] = mapped_column(ForeignKey("sponsors.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    monthly_amount: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    child: Mapped["Child"] = relationship("Child", back_populates="sponsorships")
    sponsor: Mapped[Sponsor] = relationship("Sponsor", back_populates="sponsorships")

    def to_dict(self, sponsor: bool = False, child: bool = False) -> dict:
        data = {
            "id": self.id,
            "childId": self.child_id,
            "sponsorId": self.sponsor_id,
            "startDate": iso(self.start_date),
            "endDate": iso(self.end_date),
            "isActive": self.is_active,
            "monthlyAmount": self.monthly_amount,
            "paymentMethod": self.payment_method,
            "notes": self.notes,
            "createdAt": iso(self.created_at),
        }
        if sponsor:
            data["sponsor"] = self.sponsor.to_dict() if self.sponsor else None
        if child:
            data["child"] = self.child.to_brief() if self.child else None
        return data


Index("idx_sponsorships_child_active", Sponsorship.child_id, Sponsorship.is_active)
Index("idx_sponsorships_sponsor_active", Sponsorship.sponsor_id, Sponsorship.is_active)
