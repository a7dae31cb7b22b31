"""
Schema migration runner.

    python -m sponsorkit.migrate upgrade [revision]     # default: head
    python -m sponsorkit.migrate rollback [revision]    # default: one step back
    python -m sponsorkit.migrate status

Wraps ``alembic.command`` with a config built in code, so no ``alembic.ini``
is needed; the revision history lives in Alembic's ``alembic_version`` table.
"""
from __future__ import annotations
import logging
import os
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine

from sponsorkit.utils.db import _normalize_url, default_database_url

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config(url: str | None = None) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    effective = _normalize_url(url or os.getenv("DATABASE_URL") or default_database_url())
    # configparser interpolation
    cfg.set_main_option("sqlalchemy.url", effective.replace("%", "%%"))
    return cfg


def upgrade(url: str | None = None, revision: str = "head") -> None:
    command.upgrade(alembic_config(url), revision)
    logger.info("[SponsorKit] migrated to %s", revision)


def rollback(url: str | None = None, revision: str = "-1") -> None:
    command.downgrade(alembic_config(url), revision)
    logger.info("[SponsorKit] rolled back to %s", revision)


def status(url: str | None = None) -> dict:
    """Current revision, head revision and the revisions still pending."""
    cfg = alembic_config(url)
    script = ScriptDirectory.from_config(cfg)
    engine = create_engine(cfg.get_main_option("sqlalchemy.url"))
    try:
        with engine.connect() as conn:
            current = MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
    head = script.get_current_head()
    pending = []
    for rev in script.walk_revisions(base="base", head="heads"):
        if current is not None and rev.revision == current:
            break
        pending.append(rev.revision)
    pending.reverse()
    return {"current": current, "head": head, "pending": pending}


def main(argv: list[str]) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    if len(argv) < 2 or argv[1] not in {"upgrade", "migrate", "rollback", "downgrade", "status"}:
        print(__doc__)
        return 1
    cmd = argv[1]
    arg = argv[2] if len(argv) > 2 else None
    if cmd in {"upgrade", "migrate"}:
        upgrade(revision=arg or "head")
    elif cmd in {"rollback", "downgrade"}:
        rollback(revision=arg or "-1")
    else:
        info = status()
        print(f"current: {info['current'] or '(none)'}")
        print(f"head:    {info['head']}")
        print(f"pending: {', '.join(info['pending']) or '(none)'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
