"""Internal marketplace listings table.

Revision ID: 0001_listings
Revises: None
Create Date: 2025-03-01 18:20:00
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_listings"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "listings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("make", sa.Text(), nullable=False),
        sa.Column("model", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("miles", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=True),
        sa.Column("youtube_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("highlights", sa.JSON(), nullable=True),
        sa.Column("engine", sa.Text(), nullable=True),
        sa.Column("transmission", sa.Text(), nullable=True),
        sa.Column("drivetrain", sa.Text(), nullable=True),
        sa.Column("vin", sa.String(length=17), nullable=True),
        sa.Column("seller_name", sa.Text(), nullable=True),
        sa.Column("seller_id", sa.String(length=36), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )
    op.create_index("idx_listings_status_created", "listings", ["status", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_listings_status_created", table_name="listings")
    op.drop_table("listings")
