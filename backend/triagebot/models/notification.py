"""Notification ORM - one row per entry of a user's ordered notification list.

Invariants:
    - (user_id, idx) is the entry's position; idx is 1-based and contiguous per user_id
    - idx is rewritten only by services/notification_store.py, inside the owner's transaction
    - short_description / metadata are NULL when empty, never ""

Design Decisions:
    - No unique constraint on (user_id, idx): renumbering rewrites several rows in
      one transaction and an immediate constraint would trip on intermediate states
    - `metadata` is reserved on declarative classes, so the attribute is entry_metadata
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from triagebot.db.base import Base


class Notification(Base):
    """Notification entity - a ping recorded for a user."""
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_id_idx", "user_id", "idx"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    idx: Mapped[int] = mapped_column(Integer, nullable=False)
    origin_url: Mapped[str] = mapped_column(Text, nullable=False)
    origin_html: Mapped[str] = mapped_column(Text, nullable=False, default="")
    short_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    entry_metadata: Mapped[str | None] = mapped_column(
        "metadata", Text, nullable=True,
    )
    team_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
