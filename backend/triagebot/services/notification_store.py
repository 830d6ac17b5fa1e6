"""Notification Store - per-owner ordered lists persisted with SQLAlchemy.

Invariants:
    - Every mutation runs inside the owner's lock AND one DB transaction that
      selects the owner's rows FOR UPDATE before computing the new list
    - Positions written back are always 1..N (core/notification_list.py renumbers)
    - Different owners never share a lock; operations on them run in parallel
    - NotificationNotFoundError / InvalidPositionError abort the transaction with no write

Design Decisions:
    - asyncio.Lock per owner serializes callers inside one process; FOR UPDATE
      serializes across processes on PostgreSQL (SQLite ignores it, tests run single-process)
    - Locks live in a WeakValueDictionary: an owner's lock disappears once nobody holds or awaits it
    - Store receives a session factory (DatabaseSessionManager.session) rather than a
      session: each operation owns its transaction boundary
"""

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from triagebot.core.domain_types import GithubUserId, Identifier, Position
from triagebot.core.notification_list import (
    NotificationEntry,
    acknowledge_entries,
    append_entry,
    move_entry,
    resolve_position,
    set_metadata,
)
from triagebot.models.notification import Notification

logger = logging.getLogger(__name__)

# Called as session_factory(operation, owner_id=...); see DatabaseSessionManager.session
SessionFactory = Callable[..., AbstractAsyncContextManager[AsyncSession]]


def _to_entry(row: Notification, position: int) -> NotificationEntry:
    return NotificationEntry(
        id=row.id,
        owner=GithubUserId(row.user_id),
        position=Position(position),
        origin_url=row.origin_url,
        origin_html=row.origin_html,
        short_description=row.short_description,
        metadata=row.entry_metadata,
        team_name=row.team_name,
        created_at=row.created_at,
    )


class SqlNotificationStore:
    """NotificationStore backed by the notifications table."""

    def __init__(self, session_factory: SessionFactory):
        self._session = session_factory
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, owner: GithubUserId) -> asyncio.Lock:
        lock = self._locks.get(owner)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[owner] = lock
        return lock

    @asynccontextmanager
    async def _owner_transaction(
        self, owner: GithubUserId, operation: str,
    ) -> AsyncIterator[tuple[AsyncSession, list[Notification]]]:
        """Lock the owner, open a transaction, yield (db, rows ordered by position)."""
        lock = self._lock_for(owner)
        async with lock:
            async with self._session(operation, owner_id=owner) as db:
                rows = await self._load_rows(db, owner, for_update=True)
                yield db, rows
                await db.commit()

    async def _load_rows(
        self, db: AsyncSession, owner: GithubUserId, for_update: bool = False,
    ) -> list[Notification]:
        query = (
            select(Notification)
            .where(Notification.user_id == owner)
            .order_by(Notification.idx, Notification.id)
        )
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def _entries(rows: list[Notification]) -> list[NotificationEntry]:
        return [_to_entry(row, index) for index, row in enumerate(rows, start=1)]

    @staticmethod
    def _write_positions(
        rows: list[Notification], entries: list[NotificationEntry],
    ) -> None:
        """Copy positions and metadata of surviving entries back onto their rows."""
        by_id = {row.id: row for row in rows}
        for entry in entries:
            row = by_id[entry.id]
            row.idx = entry.position
            row.entry_metadata = entry.metadata

    async def snapshot(self, owner: GithubUserId) -> list[NotificationEntry]:
        async with self._session("snapshot", owner_id=owner) as db:
            rows = await self._load_rows(db, owner)
            return self._entries(rows)

    async def acknowledge(
        self, owner: GithubUserId, identifier: Identifier,
    ) -> list[NotificationEntry]:
        async with self._owner_transaction(owner, "acknowledge") as (db, rows):
            remaining, removed = acknowledge_entries(self._entries(rows), identifier)
            removed_ids = {entry.id for entry in removed}
            for row in rows:
                if row.id in removed_ids:
                    await db.delete(row)
            self._write_positions(rows, remaining)
        logger.info(
            f"Acknowledged {len(removed)} notification(s) by {identifier!r}",
            extra={"owner_id": owner},
        )
        return removed

    async def add(
        self, owner: GithubUserId, url: str, description: str | None,
        *, origin_html: str = "", team_name: str | None = None,
    ) -> NotificationEntry:
        async with self._owner_transaction(owner, "add") as (db, rows):
            entries = append_entry(self._entries(rows), NotificationEntry(
                owner=owner,
                position=Position(0),
                origin_url=url,
                origin_html=origin_html,
                short_description=description,
                team_name=team_name,
                created_at=datetime.now(timezone.utc),
            ))
            appended = entries[-1]
            row = Notification(
                user_id=owner,
                idx=appended.position,
                origin_url=appended.origin_url,
                origin_html=appended.origin_html,
                short_description=appended.short_description,
                team_name=appended.team_name,
                created_at=appended.created_at,
            )
            db.add(row)
            await db.flush()
        logger.info(
            f"Recorded notification {url} at position {appended.position}",
            extra={"owner_id": owner},
        )
        return _to_entry(row, appended.position)

    async def move(
        self, owner: GithubUserId, from_: Identifier, to: Identifier,
    ) -> tuple[Position, Position]:
        async with self._owner_transaction(owner, "move") as (db, rows):
            entries = self._entries(rows)
            from_position = resolve_position(entries, from_)
            to_position = resolve_position(entries, to)
            self._write_positions(
                rows, move_entry(entries, from_position, to_position),
            )
        logger.info(
            f"Moved notification {from_position} to {to_position}",
            extra={"owner_id": owner},
        )
        return Position(from_position), Position(to_position)

    async def add_metadata(
        self, owner: GithubUserId, position: Position, description: str | None,
    ) -> None:
        async with self._owner_transaction(owner, "add_metadata") as (db, rows):
            self._write_positions(
                rows, set_metadata(self._entries(rows), position, description),
            )
