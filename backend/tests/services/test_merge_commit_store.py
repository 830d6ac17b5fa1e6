"""Merge Commit Store - tests for SqlMergeCommitStore upserts."""

from datetime import datetime, timezone

from sqlalchemy import select

from triagebot.models.merge_commit import MergeCommit

SHA = "a" * 40
NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def _rows(db_manager):
    async with db_manager.session() as db:
        return list((await db.execute(select(MergeCommit))).scalars().all())


async def test_record_inserts(merge_store, db_manager):
    await merge_store.record(SHA, "b" * 40, "rust-lang/rust", 12, NOW)
    [row] = await _rows(db_manager)
    assert row.parent_sha == "b" * 40
    assert row.pr_number == 12


async def test_record_same_sha_updates(merge_store, db_manager):
    await merge_store.record(SHA, "b" * 40, "rust-lang/rust", 12, NOW)
    await merge_store.record(SHA, "c" * 40, "rust-lang/rust", 13, NOW)
    [row] = await _rows(db_manager)
    assert row.parent_sha == "c" * 40
    assert row.pr_number == 13
