"""Merge Commit Store - upserts merge commits recorded from merge-bot comments."""

import logging
from datetime import datetime

from triagebot.models.merge_commit import MergeCommit
from triagebot.services.notification_store import SessionFactory

logger = logging.getLogger(__name__)


class SqlMergeCommitStore:
    """MergeCommitStore backed by the merge_commits table."""

    def __init__(self, session_factory: SessionFactory):
        self._session = session_factory

    async def record(
        self, sha: str, parent_sha: str, repository: str,
        pr_number: int | None, merged_at: datetime,
    ) -> None:
        async with self._session("record_merge_commit") as db:
            await db.merge(MergeCommit(
                sha=sha,
                parent_sha=parent_sha,
                repository=repository,
                pr_number=pr_number,
                merged_at=merged_at,
            ))
            await db.commit()
        logger.info(f"Recorded merge commit {sha} (parent {parent_sha})", extra={"repo": repository})
