"""
Module: sponsorkit/utils/auth.py
Unified comment style: module docstring + minimal inline notes.

Session handling: the access token lives in an HTTP-only cookie set at login
(``Authorization: Bearer`` is accepted too, for scripts).
"""
from __future__ import annotations
from functools import wraps
from flask import g, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from sponsorkit.models import User
from sponsorkit.utils.db import get_session


def get_current_user() -> User | None:
    ident = get_jwt_identity()
    if not ident:
        return None
    try:
        user_id = int(ident)
    except (TypeError, ValueError):
        return None
    with get_session() as s:
        return s.get(User, user_id)


def _unauthorized():
    return jsonify({"error": "Unauthorized - Please log in"}), 401


def login_required(fn):
    """Authenticated, approved and active user; sets ``g.user``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = get_current_user()
        if not user or not user.is_active:
            return _unauthorized()
        if not user.is_approved:
            return jsonify({"error": "Account pending approval"}), 403
        g.user = user
        g.user_id = user.id
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    @login_required
    def wrapper(*args, **kwargs):
        if not g.user.is_admin:
            return jsonify({"error": "Forbidden - Admin access required"}), 403
        return fn(*args, **kwargs)
    return wrapper
