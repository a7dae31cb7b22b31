"""seed the partner schools list

Revision ID: 0003_seed_schools
Revises: 0002_users
Create Date: 2025-01-03 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0003_seed_schools"
down_revision = "0002_users"
branch_labels = None
depends_on = None

SCHOOLS = [
    ("ABIM SECONDARY SCHOOL", "Abim"),
    ("ABIM TECHNICAL INSTITUTE", "Abim"),
    ("ACHUKUDU COMMUNITY PRIMARY SCHOOL", "Achukudu"),
    ("ADEA PRIMARY SCHOOL", "Adea"),
    ("ADWARI SECONDARY SCHOOL", "Adwari"),
    ("AKIGENO NURSERY AND PRIMARY SCHOOL", "Akigeno"),
    ("AKWANGAGWEL PRIMARY SCHOOL", "Akwangagwel"),
    ("ALIR PRIMARY SCHOOL", "Alir"),
    ("ANKOLE INSTITUTE OF BUSINESS AND VOCATIONAL STUDIES", "Mbarara"),
    ("APOSTLES OF JESUS SEMINARY", "Moroto"),
    ("ARAPAI AGRICULTURAL COLLEGE", "Soroti"),
    ("BUSITEMA UNIVERSITY SOROTI BRANCH", "Soroti"),
    ("FATHER BASH FOUNDATION", "Uganda"),
    ("FLORENCE NIGHTINGALE SCHOOL OF NURSING AND MIDWIFERY", "Uganda"),
    ("GLORY NURSERY AND PRIMARY SCHOOL", "Uganda"),
    ("GOOD DADDY NURSERY AND PRIMARY SCHOOL", "Uganda"),
    ("GULU UNIVERSITY", "Gulu"),
    ("HALCYON HIGH SCHOOL", "Uganda"),
    ("HUMAN DEVELOPMENT TECHNICAL TRAINING SCHOOL", "Lira"),
    ("IMMACULATE HEART OF MARY", "Uganda"),
    ("INTERNATIONAL INSTITUTE OF HEALTH SCIENCES", "Jinja"),
    ("JUBILEE 2000 SSS", "Karenga"),
    ("KAMPALA INTERNATIONAL UNIVERSITY", "Kampala"),
    ("KANGOLE GIRLS PRIMARY SCHOOL", "Kangole"),
    ("KANGOLE GIRLS SECONDARY SCHOOL", "Kangole"),
    ("KING'S KID PRIMARY SCHOOL", "Uganda"),
    ("KOMUKUNY BOYS PRIMARY SCHOOL", "Komukuny"),
    ("LIRA CENTRAL PRIMARY SCHOOL", "Lira"),
    ("LOTUKE SEED SECONDARY SCHOOL", "Lotuke"),
    ("LUZIRA SECONDARY SCHOOL", "Luzira"),
    ("MAKERERE UNIVERSITY", "Kampala"),
    ("MAKERERE UNIVERSITY JINJA CAMPUS", "Jinja"),
    ("MBALE SCHOOL FOR THE DEAF", "Mbale"),
    ("MBALE SCHOOL FOR THE DEAF - HAIRDRESSING", "Mbale"),
    ("MBARARA UNIVERSITY SCIENCE AND TECHNOLOGY", "Mbarara"),
    ("MITYANA STANDARD SECONDARY SCHOOL", "Gagavu"),
    ("MORULEM BOYS PRIMARY SCHOOL", "Morulem"),
    ("MORULEM GIRLS PRIMARY SCHOOL", "Morulem"),
    ("MORULEM GIRLS SECONDARY SCHOOL", "Morulem"),
    ("NALAKAS PRIMARY SCHOOL", "Nalakas"),
    ("NILE VOCATIONAL INSTITUTE", "Jinja"),
    ("NSAMIZI TRAINING INSTITUTE OF SOCIAL DEVELOPMENT", "Uganda"),
    ("NYAKWAE SEED SECONDARY SCHOOL", "Nyakwae"),
    ("OBOLOKOME PRIMARY SCHOOL", "Obolokome"),
    ("OJWINA PRIMARY SCHOOL", "Ojwina"),
    ("ORETA PRIMARY SCHOOL", "Oreta"),
    ("POPE JOHN PAUL II MEMORIAL SECONDARY SCHOOL", "Uganda"),
    ("RACHKOKO PRIMARY SCHOOL", "Rachkoko"),
    ("SISTO MAZZOLDI NURSERY AND PRIMARY SCHOOL", "Uganda"),
    ("SOROTI TRAINING INSTITUTE", "Soroti"),
    ("SOROTI UNIVERSITY", "Soroti"),
    ("ST ANDREW'S SECONDARY SCHOOL", "Obalanga"),
    ("ST. DANIEL COMBONI PRIMARY SCHOOL", "Uganda"),
    ("ST. KATHERINE SENIOR SECONDARY SCHOOL", "Lira"),
    ("ST. KIZITO NURSERY AND PRIMARY SCHOOL", "Amul"),
    ("ST. KIZITO PRIMARY SCHOOL", "Amul"),
    ("ST. MARY'S COLLEGE ABOKE", "Aboke"),
    ("ST. MARY'S NURSERY AND PRIMARY SCHOOL", "Uganda"),
    ("ST. MARY'S SEMINARY", "Nadiket"),
    ("ST. PETER AND PAUL PRIMARY SCHOOL", "Achukudu"),
    ("ST. PHILOMENA JUNIOR", "Uganda"),
    ("ST. THERESA NURSERY", "Uganda"),
    ("STARLIGHT NURSERY SCHOOL", "Uganda"),
    ("TOTO MARIA VOCATIONAL TRAINING CENTER", "Uganda"),
    ("YMCA WANDEGEYA", "Wandegeya"),
    ("ST. GRACIOUS S S LIRA", "Lira"),
]

schools = sa.table(
    "schools",
    sa.column("name", sa.String),
    sa.column("location", sa.String),
    sa.column("is_active", sa.Boolean),
)


def upgrade():
    bind = op.get_bind()
    existing = {row[0].lower() for row in bind.execute(sa.select(schools.c.name))}
    rows = [
        {"name": name, "location": location, "is_active": True}
        for name, location in SCHOOLS
        if name.lower() not in existing
    ]
    if rows:
        op.bulk_insert(schools, rows)


def downgrade():
    # children may still point at a seeded school; only unused rows go
    bind = op.get_bind()
    names = [name for name, _ in SCHOOLS]
    bind.execute(sa.text(
        "DELETE FROM schools WHERE name IN :names "
        "AND id NOT IN (SELECT school_id FROM children)"
    ).bindparams(sa.bindparam("names", expanding=True)), {"names": names})
