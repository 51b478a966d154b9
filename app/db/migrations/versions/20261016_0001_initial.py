"""initial

Revision ID: 20261016_0001
Revises: 
Create Date: 2026-10-16

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "20261016_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("creator_nick", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="reader"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )

    op.create_table(
        "uploaded_files",
        sa.Column("file_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("owner_user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("mime_type", sa.String(length=128), nullable=False),
        sa.Column("public_url", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )

    op.create_table(
        "comics",
        sa.Column("comic_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("cover_image", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("author_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("author_name", sa.String(length=100), nullable=False),
        sa.Column("published_revision_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("genres", sa.JSON(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="draft"),
        sa.Column("start_page_id", sa.String(length=50), nullable=False),
        sa.Column("total_pages", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_endings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_minutes", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_comics_author_id", "comics", ["author_id"])
    op.create_index("ix_comics_status", "comics", ["status"])
    op.create_index("ix_comics_published_revision_id", "comics", ["published_revision_id"])

    op.create_table(
        "comic_revisions",
        sa.Column("revision_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "comic_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("comics.comic_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="draft"),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.UniqueConstraint("comic_id", "version", name="uq_comic_revisions_comic_version"),
    )
    op.create_index("ix_comic_revisions_status", "comic_revisions", ["status"])
    op.create_index("ix_comic_revisions_created_by", "comic_revisions", ["created_by"])

    op.create_table(
        "comic_pages",
        sa.Column("comic_page_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "comic_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("comics.comic_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("page_id", sa.String(length=50), nullable=False),
        sa.Column("page_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("panels", sa.JSON(), nullable=False),
        sa.Column("choices", sa.JSON(), nullable=False),
        sa.Column("is_ending", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ending_type", sa.String(length=16), nullable=True),
        sa.Column("ending_title", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.UniqueConstraint("comic_id", "page_id", name="uq_comic_pages_comic_page"),
    )

    op.create_table(
        "subscriptions",
        sa.Column("subscription_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("subscriber_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("creator_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.UniqueConstraint("subscriber_id", "creator_id", name="uq_subscriptions_pair"),
    )
    op.create_index("ix_subscriptions_creator_id", "subscriptions", ["creator_id"])

    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "audit_logs",
        sa.Column("audit_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("actor_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("request_id", sa.String(length=64), nullable=True),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_entity_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_subscriptions_creator_id", table_name="subscriptions")
    op.drop_table("subscriptions")
    op.drop_table("comic_pages")
    op.drop_index("ix_comic_revisions_created_by", table_name="comic_revisions")
    op.drop_index("ix_comic_revisions_status", table_name="comic_revisions")
    op.drop_table("comic_revisions")
    op.drop_index("ix_comics_published_revision_id", table_name="comics")
    op.drop_index("ix_comics_status", table_name="comics")
    op.drop_index("ix_comics_author_id", table_name="comics")
    op.drop_table("comics")
    op.drop_table("uploaded_files")
    op.drop_table("users")
