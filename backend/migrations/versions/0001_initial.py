"""Initial schema – users and comments

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

Creates both tables with their unique constraints and the indexes used by
the list endpoints (soft-delete filter, creation order, author email).
"""

from alembic import op
import sqlalchemy as sa

# Alembic revision identifiers
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # -- users ----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "type",
            sa.Enum("admin", "user", name="user_type"),
            nullable=False,
            server_default="user",
        ),
        sa.Column("login", sa.String(255), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        # pbkdf2_sha256 hash – never plaintext
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_created", "users", ["created"])
    op.create_index("ix_users_deleted", "users", ["deleted"])

    # -- comments -------------------------------------------------------
    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("home_page", sa.String(2048), nullable=True),
        sa.Column("text", sa.Text(), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("replied", sa.Integer(), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_comments_email", "comments", ["email"])
    op.create_index("ix_comments_replied", "comments", ["replied"])
    op.create_index("ix_comments_created", "comments", ["created"])
    op.create_index("ix_comments_deleted", "comments", ["deleted"])


def downgrade() -> None:
    op.drop_index("ix_comments_deleted", table_name="comments")
    op.drop_index("ix_comments_created", table_name="comments")
    op.drop_index("ix_comments_replied", table_name="comments")
    op.drop_index("ix_comments_email", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_users_deleted", table_name="users")
    op.drop_index("ix_users_created", table_name="users")
    op.drop_table("users")
