"""
Alembic environment for SponsorKit.

The database URL comes from the Alembic config (set by ``sponsorkit.migrate``)
or, when run through the plain ``alembic`` command, from ``DATABASE_URL``.
"""
from alembic import context
from sqlalchemy import engine_from_config, pool
from logging.config import fileConfig
import os

from sponsorkit.models import Base  # noqa
from sponsorkit.utils.db import _normalize_url, default_database_url

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name, disable_existing_loggers=False)
target_metadata = Base.metadata


def _url() -> str:
    raw = config.get_main_option("sqlalchemy.url") or os.getenv("DATABASE_URL") or default_database_url()
    return _normalize_url(raw)


def run_migrations_offline():
    url = _url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    url = _url()
    connectable = engine_from_config(
        {"sqlalchemy.url": url},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=url.startswith("sqlite"),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
