"""Notifications and merge commits.

Revision ID: 001_notifications
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_notifications"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, nullable=False),
        sa.Column("idx", sa.Integer, nullable=False),
        sa.Column("origin_url", sa.Text, nullable=False),
        sa.Column("origin_html", sa.Text, nullable=False, server_default=""),
        sa.Column("short_description", sa.Text, nullable=True),
        sa.Column("metadata", sa.Text, nullable=True),
        sa.Column("team_name", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id_idx", "notifications", ["user_id", "idx"])

    op.create_table(
        "merge_commits",
        sa.Column("sha", sa.String(40), primary_key=True),
        sa.Column("parent_sha", sa.String(40), nullable=False),
        sa.Column("repository", sa.String(200), nullable=False),
        sa.Column("pr_number", sa.Integer, nullable=True),
        sa.Column("merged_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("merge_commits")
    op.drop_index("ix_notifications_user_id_idx", table_name="notifications")
    op.drop_table("notifications")
