import pytest
from sqlalchemy import select

from sponsorkit import manage
from sponsorkit.models import Proxy, School, User
from sponsorkit.utils.config_handler import DEFAULT_DEV_SECRET, load_config


def test_production_requires_secret(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValueError):
        load_config({"APP_ENV": "production", "SECRET_KEY": ""})


def test_development_falls_back_to_dev_secret(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
    cfg = load_config({"APP_ENV": "development", "SECRET_KEY": ""})
    assert cfg["SECRET_KEY"] == DEFAULT_DEV_SECRET
    assert cfg["JWT_SECRET_KEY"] == DEFAULT_DEV_SECRET


def test_allowed_origins_from_env(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")
    assert load_config()["ALLOWED_ORIGINS"] == ["https://a.example", "https://b.example"]


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.get_json()
    assert body["status"] == "ok"
    assert body["database"]["ok"] is True
    assert "timestamp" in body
    assert r.headers["X-Request-ID"]


def test_request_id_is_echoed(client):
    r = client.get("/api/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"


def test_error_shapes(client, auth):
    assert client.get("/api/nowhere").get_json().keys() == {"error"}
    r = client.get("/api/sponsors/999", headers=auth)
    assert r.status_code == 404
    assert r.get_json() == {"error": "Sponsor not found"}
    r = client.get("/api/children")
    assert r.status_code == 401
    assert r.get_json() == {"error": "Unauthorized - Please log in"}


def test_cors_allows_credentials(client):
    r = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
    assert r.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert r.headers["Access-Control-Allow-Credentials"] == "true"


def test_manage_create_admin_and_seed(app, session):
    assert manage.create_admin("root", "rootpass1", "Root User") == "created"
    assert manage.create_admin("root", "otherpass") == "updated"
    user = session.execute(select(User).where(User.username == "root")).scalar_one()
    assert user.role == "admin" and user.is_approved and user.is_active
    assert manage.set_password("root", "newpass12") is True
    assert manage.set_password("ghost", "x") is False

    assert manage.seed_defaults() == {"schools": 2, "proxies": 2}
    assert manage.seed_defaults() == {"schools": 0, "proxies": 0}
    session.expire_all()
    assert len(session.execute(select(School)).scalars().all()) == 2
    assert len(session.execute(select(Proxy)).scalars().all()) == 2
