"""create site stats and visitors tables

Revision ID: 3c9e1f7a2b40
Revises:
Create Date: 2026-10-18 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3c9e1f7a2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "site_stats",
        sa.Column("site_origin", sa.String(length=2048), nullable=False),
        sa.Column("uv", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("pv", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("site_origin"),
    )
    op.create_table(
        "visitors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("site_origin", sa.String(length=2048), nullable=False),
        sa.Column("visitor_hash", sa.String(length=64), nullable=False),
        sa.Column("first_visit", sa.DateTime(), nullable=False),
        sa.Column("last_visit", sa.DateTime(), nullable=False),
        sa.Column("visit_count", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("site_origin", "visitor_hash", name="uq_visitors_site_origin_visitor_hash"),
    )


def downgrade():
    op.drop_table("visitors")
    op.drop_table("site_stats")
