"""core tables: schools, proxies, sponsors, children, sponsorships, child_photos

Revision ID: 0001_core_tables
Revises:
Create Date: 2025-01-01 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_core_tables"
down_revision = None
branch_labels = None
depends_on = None

NOW = sa.text("CURRENT_TIMESTAMP")


def _has_table(table: str) -> bool:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    try:
        return insp.has_table(table)  # type: ignore[attr-defined]
    except Exception:
        return False


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
    ]


def upgrade():
    if not _has_table("schools"):
        op.create_table(
            "schools",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False, unique=True),
            sa.Column("location", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
            *_timestamps(),
        )

    if not _has_table("proxies"):
        op.create_table(
            "proxies",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("full_name", sa.String(length=255), nullable=False, unique=True),
            sa.Column("role", sa.String(length=128), nullable=False),
            sa.Column("contact", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("phone", sa.String(length=64), nullable=True),
            sa.Column("description", sa.Text, nullable=True),
            *_timestamps(),
        )

    if not _has_table("sponsors"):
        op.create_table(
            "sponsors",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("full_name", sa.String(length=255), nullable=False),
            sa.Column("contact", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("phone", sa.String(length=64), nullable=True),
            sa.Column("proxy_id", sa.Integer, sa.ForeignKey("proxies.id"), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_sponsors_proxy_id", "sponsors", ["proxy_id"])

    if not _has_table("children"):
        op.create_table(
            "children",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("first_name", sa.String(length=128), nullable=False),
            sa.Column("last_name", sa.String(length=128), nullable=False),
            sa.Column("date_of_birth", sa.Date, nullable=False),
            sa.Column("gender", sa.String(length=16), nullable=False),
            sa.Column("class", sa.String(length=16), nullable=False),
            sa.Column("school_id", sa.Integer, sa.ForeignKey("schools.id"), nullable=False),
            sa.Column("father_full_name", sa.String(length=255), nullable=False),
            sa.Column("father_address", sa.String(length=255), nullable=True),
            sa.Column("father_contact", sa.String(length=255), nullable=True),
            sa.Column("mother_full_name", sa.String(length=255), nullable=False),
            sa.Column("mother_address", sa.String(length=255), nullable=True),
            sa.Column("mother_contact", sa.String(length=255), nullable=True),
            sa.Column("story", sa.Text, nullable=True),
            sa.Column("comment", sa.Text, nullable=True),
            sa.Column("is_sponsored", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("date_entered_register", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
            sa.Column("last_profile_update", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
            *_timestamps(),
        )
        op.create_index("ix_children_school_id", "children", ["school_id"])
        op.create_index("idx_children_created_desc", "children", [sa.text("created_at DESC")])

    if not _has_table("sponsorships"):
        op.create_table(
            "sponsorships",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("child_id", sa.Integer, sa.ForeignKey("children.id", ondelete="CASCADE"), nullable=False),
            sa.Column("sponsor_id", sa.Integer, sa.ForeignKey("sponsors.id", ondelete="CASCADE"), nullable=False),
            sa.Column("start_date", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
            sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
            sa.Column("monthly_amount", sa.Numeric(12, 2), nullable=True),
            sa.Column("payment_method", sa.String(length=64), nullable=True),
            sa.Column("notes", sa.Text, nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_sponsorships_child_id", "sponsorships", ["child_id"])
        op.create_index("ix_sponsorships_sponsor_id", "sponsorships", ["sponsor_id"])
        op.create_index("idx_sponsorships_child_active", "sponsorships", ["child_id", "is_active"])
        op.create_index("idx_sponsorships_sponsor_active", "sponsorships", ["sponsor_id", "is_active"])

    if not _has_table("child_photos"):
        op.create_table(
            "child_photos",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("child_id", sa.Integer, sa.ForeignKey("children.id", ondelete="CASCADE"), nullable=False),
            sa.Column("photo_base64", sa.Text, nullable=False),
            sa.Column("mime_type", sa.String(length=64), nullable=False),
            sa.Column("file_name", sa.String(length=255), nullable=True),
            sa.Column("file_size", sa.Integer, nullable=True),
            sa.Column("description", sa.Text, nullable=True),
            sa.Column("is_profile", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        )
        op.create_index("ix_child_photos_child_id", "child_photos", ["child_id"])


def downgrade():
    for table in ("child_photos", "sponsorships", "children", "sponsors", "proxies", "schools"):
        if _has_table(table):
            op.drop_table(table)
