"""
Module: sponsorkit/manage.py
Unified comment style: module docstring + minimal inline notes.

    python -m sponsorkit.manage create-admin <username> <password> [full name]
    python -m sponsorkit.manage set-password <username> <password>
    python -m sponsorkit.manage seed
"""
import sys
from sqlalchemy import func, select
from werkzeug.security import generate_password_hash
from sponsorkit.utils.db import get_session, init_engine_session
from sponsorkit.models import Proxy, School, User, UserRole

DEMO_SCHOOLS = [
    ("Test Primary School", "Kampala"),
    ("Test Secondary School", "Gulu"),
]

DEMO_PROXIES = [
    ("Parish Office", "Parish coordinator"),
    ("Community Liaison", "Field officer"),
]


def create_admin(username: str, password: str, full_name: str | None = None) -> str:
    """
    Create an approved, active admin, or promote and re-enable an existing
    user of that name. Returns ``"created"`` or ``"updated"``.
    """
    with get_session() as s:
        u = s.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if u:
            u.role = UserRole.admin.value
            u.is_approved = True
            u.is_active = True
            u.password_hash = generate_password_hash(password)
            s.commit()
            return "updated"
        s.add(User(
            username=username,
            password_hash=generate_password_hash(password),
            full_name=full_name or username,
            role=UserRole.admin.value,
            is_approved=True,
            is_active=True,
        ))
        s.commit()
        return "created"


def set_password(username: str, password: str) -> bool:
    with get_session() as s:
        u = s.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if not u:
            return False
        u.password_hash = generate_password_hash(password)
        s.commit()
        return True


def seed_defaults() -> dict:
    """Idempotent demo data: a couple of schools and proxies."""
    added = {"schools": 0, "proxies": 0}
    with get_session() as s:
        for name, location in DEMO_SCHOOLS:
            if not s.execute(select(School.id).where(func.lower(School.name) == name.lower())).first():
                s.add(School(name=name, location=location, is_active=True))
                added["schools"] += 1
        for name, role in DEMO_PROXIES:
            if not s.execute(select(Proxy.id).where(func.lower(Proxy.full_name) == name.lower())).first():
                s.add(Proxy(full_name=name, role=role, contact=""))
                added["proxies"] += 1
        s.commit()
    return added


def main(argv: list[str]) -> int:
    try:
        init_engine_session()
    except Exception as e:
        print(f"DB init failed: {e}")
        return 1

    if len(argv) >= 2 and argv[1] == "create-admin":
        if len(argv) < 4:
            print("usage: python -m sponsorkit.manage create-admin <username> <password> [full name]")
            return 2
        full_name = " ".join(argv[4:]) or None
        result = create_admin(argv[2], argv[3], full_name)
        print(f"{result}: {argv[2]} (admin)")
        return 0

    if len(argv) >= 2 and argv[1] == "set-password":
        if len(argv) < 4:
            print("usage: python -m sponsorkit.manage set-password <username> <password>")
            return 2
        if not set_password(argv[2], argv[3]):
            print(f"not found: {argv[2]}")
            return 1
        print(f"password updated: {argv[2]}")
        return 0

    if len(argv) >= 2 and argv[1] == "seed":
        added = seed_defaults()
        print(f"seeded: {added['schools']} schools, {added['proxies']} proxies")
        return 0

    print(__doc__)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
