"""MergeCommit ORM - merge commits announced by the merge bot on pull requests.

Invariants:
    - sha is the primary key; recording the same sha twice updates the row
    - parent_sha is the first parent (the previous tip of the target branch)
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from triagebot.db.base import Base


class MergeCommit(Base):
    """MergeCommit entity."""
    __tablename__ = "merge_commits"

    sha: Mapped[str] = mapped_column(String(40), primary_key=True)
    parent_sha: Mapped[str] = mapped_column(String(40), nullable=False)
    repository: Mapped[str] = mapped_column(String(200), nullable=False)
    pr_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    merged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
