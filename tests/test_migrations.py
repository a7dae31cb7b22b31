from sqlalchemy import create_engine, func, inspect, select, text

from sponsorkit import migrate
from sponsorkit.app import create_app
from sponsorkit.models import School
from sponsorkit.utils import db as dbmod


def test_upgrade_to_head_creates_schema_and_seeds_schools(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    assert migrate.status(url)["current"] is None

    migrate.upgrade(url)

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
        assert {"schools", "proxies", "sponsors", "children", "sponsorships",
                "child_photos", "users", "alembic_version"} <= tables
        columns = {c["name"] for c in inspect(engine).get_columns("children")}
        assert {"is_archived", "archived_at", "is_sponsored"} <= columns
        with engine.connect() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM schools")).scalar() == 66
    finally:
        engine.dispose()

    info = migrate.status(url)
    assert info["current"] == info["head"]
    assert info["pending"] == []


def test_upgrade_twice_does_not_duplicate_seed(tmp_path):
    url = f"sqlite:///{tmp_path / 'twice.db'}"
    migrate.upgrade(url)
    migrate.upgrade(url)
    engine = create_engine(url)
    try:
        with engine.connect() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM schools")).scalar() == 66
    finally:
        engine.dispose()


def test_app_boots_with_auto_migrate(tmp_path):
    app = create_app({
        "DATABASE_URL": f"sqlite:///{tmp_path / 'auto.db'}",
        "AUTO_MIGRATE": True,
        "SECRET_KEY": "test-secret",
        "LOG_LEVEL": "WARNING",
    })
    try:
        with dbmod.get_session() as s:
            assert s.execute(select(func.count(School.id))).scalar() == 66
        assert app.test_client().get("/api/health").status_code == 200
    finally:
        dbmod.shutdown_engine()
