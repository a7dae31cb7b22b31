"""
Module: sponsorkit/models/child.py
Unified comment style: module docstring + minimal inline notes.
"""
from __future__ import annotations
from datetime import date, datetime
from typing import TYPE_CHECKING, List
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Date, DateTime, Boolean, ForeignKey, Index, func
from sponsorkit.utils.db import Base
from .base import utcnow, iso

if TYPE_CHECKING:
    from .school import School
    from .sponsor import Sponsorship


class Child(Base):
    __tablename__ = "children"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False)
    class_name: Mapped[str] = mapped_column("class", String(16), nullable=False)
    school_id: Mapped[int] = mapped_column(ForeignKey("schools.id"), nullable=False, index=True)

    # family
    father_full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    father_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    father_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mother_full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mother_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mother_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)

    story: Mapped[str | None] = mapped_column(Text, nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    # kept in step with active sponsorships by services.sponsorship_sync
    is_sponsored: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    date_entered_register: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_profile_update: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    school: Mapped["School"] = relationship("School", back_populates="children")
    sponsorships: Mapped[List["Sponsorship"]] = relationship(
        "Sponsorship", back_populates="child", cascade="all, delete-orphan",
        order_by="Sponsorship.start_date.desc()",
    )
    photos: Mapped[List["ChildPhoto"]] = relationship(
        "ChildPhoto", back_populates="child", cascade="all, delete-orphan",
        order_by=lambda: [ChildPhoto.uploaded_at.desc(), ChildPhoto.id.desc()],
    )

    @property
    def active_sponsorships(self) -> list["Sponsorship"]:
        return [sp for sp in self.sponsorships if sp.is_active]

    @property
    def profile_photo(self) -> "ChildPhoto | None":
        for photo in self.photos:
            if photo.is_profile:
                return photo
        return None

    def to_dict(self, relations: bool = True) -> dict:
        data = {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "dateOfBirth": iso(self.date_of_birth),
            "gender": self.gender,
            "class": self.class_name,
            "schoolId": self.school_id,
            "fatherFullName": self.father_full_name,
            "fatherAddress": self.father_address,
            "fatherContact": self.father_contact,
            "motherFullName": self.mother_full_name,
            "motherAddress": self.mother_address,
            "motherContact": self.mother_contact,
            "story": self.story,
            "comment": self.comment,
            "isSponsored": self.is_sponsored,
            "isArchived": self.is_archived,
            "archivedAt": iso(self.archived_at),
            "dateEnteredRegister": iso(self.date_entered_register),
            "lastProfileUpdate": iso(self.last_profile_update),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
        if relations:
            profile = self.profile_photo
            data["school"] = self.school.to_dict() if self.school else None
            data["sponsorships"] = [sp.to_dict(sponsor=True) for sp in self.sponsorships]
            data["photoCount"] = len(self.photos)
            data["profilePhotoId"] = profile.id if profile else None
        return data

    def to_brief(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "school": self.school.to_brief() if self.school else None,
        }


class ChildPhoto(Base):
    __tablename__ = "child_photos"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    child_id: Mapped[int] = mapped_column(ForeignKey("children.id", ondelete="CASCADE"), nullable=False, index=True)
    photo_base64: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(64), nullable=False)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # at most one per child, maintained by services.photo_service
    is_profile: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    child: Mapped[Child] = relationship("Child", back_populates="photos")

    def to_dict(self, include_base64: bool = False) -> dict:
        data = {
            "id": self.id,
            "childId": self.child_id,
            "mimeType": self.mime_type,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "description": self.description,
            "uploadedAt": iso(self.uploaded_at),
            "isProfile": self.is_profile,
        }
        if include_base64:
            data["photoBase64"] = self.photo_base64
            data["dataUrl"] = f"data:{self.mime_type};base64,{self.photo_base64}"
        return data


Index("idx_children_is_archived_is_sponsored", Child.is_archived, Child.is_sponsored)
Index("idx_children_created_desc", Child.created_at.desc())
