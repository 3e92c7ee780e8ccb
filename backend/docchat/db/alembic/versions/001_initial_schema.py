"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-17

Creates:
- app_user, user_session
- document
- chat, message
- org_settings
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create all tables."""
    # app_user table
    op.create_table(
        "app_user",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("email", name="uq_app_user_email"),
        sa.UniqueConstraint("username", name="uq_app_user_username"),
    )

    # user_session table
    op.create_table(
        "user_session",
        sa.Column("token_hash", sa.Text(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.user_id"], ondelete="CASCADE"),
    )
    op.create_index("idx_session_user", "user_session", ["user_id"])

    # document table
    op.create_table(
        "document",
        sa.Column("doc_id", sa.Uuid(), primary_key=True),
        sa.Column("filename", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content_json", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_document_created", "document", ["created_at"])

    # chat table
    op.create_table(
        "chat",
        sa.Column("chat_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.user_id"]),
    )
    op.create_index("idx_chat_user_updated", "chat", ["user_id", "updated_at"])

    # message table
    op.create_table(
        "message",
        sa.Column("message_id", sa.Uuid(), primary_key=True),
        sa.Column("chat_id", sa.Uuid(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("sender", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["chat_id"], ["chat.chat_id"]),
    )
    op.create_index("idx_message_chat_seq", "message", ["chat_id", "seq"])

    # org_settings table
    op.create_table(
        "org_settings",
        sa.Column("settings_id", sa.Integer(), primary_key=True),
        sa.Column("data", JSONType, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("org_settings")
    op.drop_index("idx_message_chat_seq", table_name="message")
    op.drop_table("message")
    op.drop_index("idx_chat_user_updated", table_name="chat")
    op.drop_table("chat")
    op.drop_index("idx_document_created", table_name="document")
    op.drop_table("document")
    op.drop_index("idx_session_user", table_name="user_session")
    op.drop_table("user_session")
    op.drop_table("app_user")
