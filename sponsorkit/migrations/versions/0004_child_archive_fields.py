"""child archive fields

Revision ID: 0004_child_archive_fields
Revises: 0003_seed_schools
Create Date: 2025-01-04 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0004_child_archive_fields"
down_revision = "0003_seed_schools"
branch_labels = None
depends_on = None


def _has_column(table: str, column: str) -> bool:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    try:
        cols = [c.get("name") for c in insp.get_columns(table)]  # type: ignore[attr-defined]
        return column in cols
    except Exception:
        return False


def _has_index(table: str, name: str) -> bool:
    insp = sa.inspect(op.get_bind())
    return any(ix.get("name") == name for ix in insp.get_indexes(table))


def upgrade():
    if not _has_column("children", "is_archived"):
        op.add_column("children", sa.Column("is_archived", sa.Boolean, nullable=False, server_default=sa.false()))
    if not _has_column("children", "archived_at"):
        op.add_column("children", sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True))
    if not _has_index("children", "idx_children_is_archived_is_sponsored"):
        op.create_index("idx_children_is_archived_is_sponsored", "children", ["is_archived", "is_sponsored"])


def downgrade():
    if _has_index("children", "idx_children_is_archived_is_sponsored"):
        op.drop_index("idx_children_is_archived_is_sponsored", table_name="children")
    with op.batch_alter_table("children") as batch:
        batch.drop_column("archived_at")
        batch.drop_column("is_archived")
