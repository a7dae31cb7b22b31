from flask import Blueprint, g, request, jsonify
from werkzeug.security import check_password_hash, generate_password_hash
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from sqlalchemy import func, select

from sponsorkit.utils.db import get_session
from sponsorkit.utils.auth import login_required, admin_required
from sponsorkit.utils.validation import check_email, clean_str
from sponsorkit.models import User, UserRole, utcnow

bp = Blueprint("auth", __name__, url_prefix="/api/auth")

MIN_PASSWORD_LENGTH = 6


def _public_user(u: User) -> dict:
    return {
        "id": u.id,
        "username": u.username,
        "fullName": u.full_name,
        "email": u.email,
        "role": u.role,
        "isApproved": u.is_approved,
    }


# -----------------------------
# Account registration / session
# -----------------------------
@bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    username = clean_str(data.get("username"))
    password = data.get("password") or ""
    full_name = clean_str(data.get("fullName"))
    if not username or not password or not full_name:
        return jsonify({"error": "Username, password, and full name are required"}), 400
    if len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({"error": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}), 400
    email = check_email(data.get("email"))

    with get_session() as s:  # type: Session
        exists = s.execute(
            select(User.id).where(func.lower(User.username) == username.lower())
        ).first()
        if exists:
            return jsonify({"error": "Username already exists"}), 400
        u = User(
            username=username,
            password_hash=generate_password_hash(password),
            full_name=full_name,
            email=email,
            role=UserRole.user.value,
            is_approved=False,
            is_active=True,
        )
        s.add(u)
        s.commit()
        s.refresh(u)
        return jsonify({
            "message": "Registration successful. Your account is pending admin approval.",
            "user": {**_public_user(u), "createdAt": u.to_dict()["createdAt"]},
        }), 201


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""

    with get_session() as s:  # type: Session
        u = s.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if not u or not check_password_hash(u.password_hash, password):
            return jsonify({"error": "Invalid username or password"}), 401
        if not u.is_approved:
            return jsonify({"error": "Account pending admin approval"}), 401
        if not u.is_active:
            return jsonify({"error": "Account has been deactivated"}), 401

        u.last_login_at = utcnow()
        s.commit()
        s.refresh(u)

        token = create_access_token(identity=str(u.id), additional_claims={"role": u.role})
        resp = jsonify({"message": "Login successful", "user": _public_user(u)})
        set_access_cookies(resp, token)
        return resp


@bp.post("/logout")
def logout():
    resp = jsonify({"message": "Logout successful"})
    unset_jwt_cookies(resp)
    return resp


@bp.get("/me")
@login_required
def me():
    return jsonify({"user": _public_user(g.user)})


# -----------------------------
# Admin: user approval
# -----------------------------
@bp.get("/pending-users")
@admin_required
def pending_users():
    with get_session() as s:  # type: Session
        rows = s.execute(
            select(User).where(User.is_approved.is_(False)).order_by(User.created_at.desc())
        ).scalars().all()
        return jsonify({"users": [u.to_dict() for u in rows]})


@bp.get("/users")
@admin_required
def list_users():
    with get_session() as s:  # type: Session
        rows = s.execute(select(User).order_by(User.created_at.desc())).scalars().all()
        return jsonify({"users": [u.to_dict() for u in rows]})


def _set_user_flag(user_id: int, message: str, **flags):
    with get_session() as s:  # type: Session
        u = s.get(User, user_id)
        if not u:
            return jsonify({"error": "User not found"}), 404
        for key, value in flags.items():
            setattr(u, key, value)
        s.commit()
        s.refresh(u)
        return jsonify({"message": message, "user": u.to_dict()})


@bp.patch("/users/<int:user_id>/approve")
@admin_required
def approve_user(user_id: int):
    return _set_user_flag(user_id, "User approved", is_approved=True)


@bp.patch("/users/<int:user_id>/deactivate")
@admin_required
def deactivate_user(user_id: int):
    if user_id == g.user_id:
        return jsonify({"error": "You cannot deactivate your own account"}), 400
    return _set_user_flag(user_id, "User deactivated", is_active=False)


@bp.patch("/users/<int:user_id>/activate")
@admin_required
def activate_user(user_id: int):
    return _set_user_flag(user_id, "User activated", is_active=True)
