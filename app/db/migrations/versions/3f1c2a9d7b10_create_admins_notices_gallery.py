"""Create admins, notices and gallery tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18 10:12:31.408215

"""
from alembic import op
import sqlalchemy as sa


revision = '3f1c2a9d7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "admins",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="admin"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)
    op.create_index("ix_admins_created_at", "admins", ["created_at"])

    op.create_table(
        "notices",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attachment", sa.JSON(), nullable=True),
        sa.Column("created_by", sa.String(32), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("updated_by", sa.String(32), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notices_date", "notices", ["date"])
    op.create_index("ix_notices_created_at", "notices", ["created_at"])
    op.create_index("ix_notices_is_active", "notices", ["is_active"])

    op.create_table(
        "gallery",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(30), nullable=False, server_default="other"),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("image", sa.JSON(), nullable=False),
        sa.Column("uploaded_by", sa.String(32), sa.ForeignKey("admins.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_gallery_category", "gallery", ["category"])
    op.create_index("ix_gallery_created_at", "gallery", ["created_at"])


def downgrade():
    op.drop_table("gallery")
    op.drop_table("notices")
    op.drop_table("admins")
