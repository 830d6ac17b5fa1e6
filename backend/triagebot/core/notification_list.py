"""Notification List Algebra - pure operations over one owner's ordered notification list.

Invariants:
    - Every function takes the owner's current snapshot ordered by position and returns a new list
    - Returned lists are renumbered: positions are exactly 1..N, no gaps, no duplicates
    - Acknowledge by position: NotificationNotFoundError outside [1, N]
    - Acknowledge by URL: removes every exact origin_url match; no match is an empty removal, not an error
    - Move / set_metadata: InvalidPositionError for 0 or anything outside [1, N]
    - Empty descriptions and empty metadata are stored as None

Design Decisions:
    - Pure functions over a list snapshot: the store owns locking and persistence,
      this module owns the renumbering rules and is testable without a database
    - Move is remove-then-insert, so every other entry keeps its relative order
"""

from dataclasses import dataclass, replace
from datetime import datetime

from triagebot.core.domain_types import GithubUserId, Identifier, Position
from triagebot.core.errors import InvalidPositionError, NotificationNotFoundError


@dataclass(frozen=True)
class NotificationEntry:
    """One recorded ping, owned by exactly one user's list."""
    owner: GithubUserId
    position: Position
    origin_url: str
    created_at: datetime
    short_description: str | None = None
    metadata: str | None = None
    origin_html: str = ""
    team_name: str | None = None
    id: int | None = None


def renumber(entries: list[NotificationEntry]) -> list[NotificationEntry]:
    """Assign positions 1..N in list order."""
    return [
        entry if entry.position == index else replace(entry, position=Position(index))
        for index, entry in enumerate(entries, start=1)
    ]


def normalize_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def acknowledge_entries(
    entries: list[NotificationEntry], identifier: Identifier,
) -> tuple[list[NotificationEntry], list[NotificationEntry]]:
    """Remove by position or URL. Returns (remaining, removed)."""
    if isinstance(identifier, int):
        if not 1 <= identifier <= len(entries):
            raise NotificationNotFoundError(identifier, len(entries))
        removed = [entries[identifier - 1]]
        remaining = entries[:identifier - 1] + entries[identifier:]
    else:
        removed = [e for e in entries if e.origin_url == identifier]
        remaining = [e for e in entries if e.origin_url != identifier]
    return renumber(remaining), removed


def append_entry(
    entries: list[NotificationEntry], entry: NotificationEntry,
) -> list[NotificationEntry]:
    """Append at position N+1 with a normalized description."""
    entry = replace(
        entry,
        position=Position(len(entries) + 1),
        short_description=normalize_text(entry.short_description),
    )
    return entries + [entry]


def check_position(entries: list[NotificationEntry], position: int) -> None:
    if not 1 <= position <= len(entries):
        raise InvalidPositionError(position, len(entries))


def move_entry(
    entries: list[NotificationEntry], from_: int, to: int,
) -> list[NotificationEntry]:
    """Relocate the entry at from_ to position to."""
    check_position(entries, from_)
    check_position(entries, to)
    if from_ == to:
        return list(entries)
    moved = list(entries)
    entry = moved.pop(from_ - 1)
    moved.insert(to - 1, entry)
    return renumber(moved)


def set_metadata(
    entries: list[NotificationEntry], position: int, description: str | None,
) -> list[NotificationEntry]:
    """Replace (not append to) the metadata of the entry at position."""
    check_position(entries, position)
    updated = list(entries)
    updated[position - 1] = replace(
        updated[position - 1], metadata=normalize_text(description),
    )
    return updated


def resolve_position(entries: list[NotificationEntry], identifier: Identifier) -> int:
    """Map an identifier to a position; URLs resolve to their first match."""
    if isinstance(identifier, int):
        return identifier
    for entry in entries:
        if entry.origin_url == identifier:
            return entry.position
    raise NotificationNotFoundError(identifier, len(entries))
