# sponsorkit/utils/db.py
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator
import atexit
import logging
import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


_engine: Engine | None = None
SessionLocal: sessionmaker | None = None
EFFECTIVE_DB_URL = ""


def default_database_url() -> str:
    data_dir = os.getenv("DATA_DIR") or os.path.join(os.getcwd(), "data")
    return f"sqlite:///{os.path.join(data_dir, 'sponsorkit.db')}"


def _normalize_url(url: str) -> str:
    if not url:
        return url
    # psycopg v3 driver for bare postgres URLs
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url.replace("postgresql://", "postgresql+psycopg://", 1) if url.startswith("postgresql://") else url


def _ensure_sqlite_dir(url: str) -> None:
    if not url.startswith("sqlite:///") or url.endswith(":memory:"):
        return
    path = url[len("sqlite:///"):]
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)


def _enable_sqlite_fk(eng: Engine) -> None:
    @event.listens_for(eng, "connect")
    def _fk_pragma(dbapi_conn, _record):  # noqa: ANN001
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()


def init_engine_session(url: str | None = None) -> Engine:
    """
    Create the process-wide engine and session factory.

    Called once by ``create_app``; calling it again with a different URL
    replaces the engine (tests use one SQLite file per test).
    """
    global _engine, SessionLocal, EFFECTIVE_DB_URL

    raw = url or os.getenv("DATABASE_URL") or default_database_url()
    effective = _normalize_url(raw)
    if _engine is not None and effective == EFFECTIVE_DB_URL:
        return _engine
    if _engine is not None:
        _engine.dispose()

    kwargs: dict = {"pool_pre_ping": True}
    if effective.startswith("sqlite"):
        _ensure_sqlite_dir(effective)
        kwargs["connect_args"] = {"check_same_thread": False}
    eng = create_engine(effective, **kwargs)
    if effective.startswith("sqlite"):
        _enable_sqlite_fk(eng)

    with eng.connect() as conn:
        conn.exec_driver_sql("SELECT 1")

    _engine = eng
    SessionLocal = sessionmaker(bind=_engine, autoflush=False)
    EFFECTIVE_DB_URL = effective
    logger.info("[SponsorKit] DB connected: %s", _mask_url(effective))
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        init_engine_session()
    return _engine  # type: ignore[return-value]


def create_schema() -> None:
    from sponsorkit import models  # noqa: F401  registers mappers
    Base.metadata.create_all(get_engine())


def shutdown_engine() -> None:
    global _engine, SessionLocal, EFFECTIVE_DB_URL
    if _engine is not None:
        _engine.dispose()
        logger.info("[SponsorKit] DB engine disposed")
    _engine = None
    SessionLocal = None
    EFFECTIVE_DB_URL = ""


atexit.register(shutdown_engine)


def _mask_url(url: str) -> str:
    if "://" not in url or "@" not in url:
        return url
    left, rest = url.split("://", 1)
    cred_part, host_part = rest.split("@", 1)
    if ":" in cred_part:
        cred_part = f"{cred_part.split(':', 1)[0]}:***"
    return f"{left}://{cred_part}@{host_part}"


def get_db_health() -> dict:
    """DB status for /api/health."""
    ok = False
    driver = None
    err = None
    try:
        eng = get_engine()
        with eng.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        ok = True
        driver = eng.url.drivername
    except Exception as e:  # noqa: BLE001
        err = str(e)
    return {
        "ok": ok,
        "url": _mask_url(EFFECTIVE_DB_URL),
        "driver": driver,
        **({"error": err} if err else {}),
    }


@contextmanager
def get_session() -> Iterator[Session]:
    """One unit of work; uncommitted changes are rolled back on error."""
    if SessionLocal is None:
        init_engine_session()
    db = SessionLocal()  # type: ignore[misc]
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
