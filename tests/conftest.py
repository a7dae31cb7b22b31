import pytest
from werkzeug.security import generate_password_hash
from flask_jwt_extended import create_access_token

from sponsorkit.app import create_app
from sponsorkit.models import User
from sponsorkit.utils import db as dbmod


def _make_user(session, username, role="user", approved=True, active=True, password="secret123"):
    u = User(
        username=username,
        password_hash=generate_password_hash(password),
        full_name=username.title(),
        role=role,
        is_approved=approved,
        is_active=active,
    )
    session.add(u); session.commit()
    return u


@pytest.fixture()
def app(tmp_path):
    # one throwaway SQLite file per test
    a = create_app({
        "DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}",
        "TESTING": True,
        "AUTO_MIGRATE": False,
        "SECRET_KEY": "test-secret",
        "JWT_SECRET_KEY": "test-jwt-secret",
        "COOKIE_SECURE": False,
        "EXPOSE_ERROR_DETAILS": True,
        "LOG_LEVEL": "WARNING",
    })
    yield a
    dbmod.shutdown_engine()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def session(app):
    s = dbmod.SessionLocal()
    yield s
    s.rollback(); s.close()


@pytest.fixture()
def admin_token(app, session):
    u = _make_user(session, "admin", role="admin")
    with app.app_context():
        return create_access_token(identity=str(u.id), additional_claims={"role": "admin"})


@pytest.fixture()
def user_token(app, session):
    u = _make_user(session, "user1")
    with app.app_context():
        return create_access_token(identity=str(u.id), additional_claims={"role": "user"})


@pytest.fixture()
def auth(user_token):
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture()
def admin_auth(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture()
def make_user(session):
    def _factory(username, **kw):
        return _make_user(session, username, **kw)
    return _factory
