"""
Module: sponsorkit/models/school.py
Unified comment style: module docstring + minimal inline notes.
"""
from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, List
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, DateTime, Boolean, func
from sponsorkit.utils.db import Base
from .base import utcnow, iso

if TYPE_CHECKING:
    from .child import Child


class School(Base):
    __tablename__ = "schools"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    children: Mapped[List["Child"]] = relationship("Child", back_populates="school")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "isActive": self.is_active,
            "createdAt": iso(self.created_at),
        }

    def to_brief(self) -> dict:
        return {"id": self.id, "name": self.name, "location": self.location}
