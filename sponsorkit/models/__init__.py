"""
Module: sponsorkit/models/__init__.py
Unified comment style: module docstring + minimal inline notes.
"""
from sponsorkit.utils.db import Base
from .base import User, UserRole, utcnow, iso
from .school import School
from .child import Child, ChildPhoto
from .sponsor import Proxy, Sponsor, Sponsorship

__all__ = [
    "Base", "User", "UserRole", "utcnow", "iso",
    "School", "Child", "ChildPhoto",
    "Proxy", "Sponsor", "Sponsorship",
]
