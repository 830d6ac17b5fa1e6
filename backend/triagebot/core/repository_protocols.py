"""Boundary Protocols - contracts between core and shell for stores and identity lookups.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - Every NotificationStore mutation is atomic per owner: the positions a user saw
      before issuing a command are the positions the operation acts on
    - Store errors: NotificationNotFoundError / InvalidPositionError are user-facing,
      DatabaseError is internal

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - Async in Protocol: implementations do IO, the pure list algebra they wrap does not
"""

from datetime import datetime
from typing import Protocol

from triagebot.core.domain_types import GithubUserId, Identifier, Position, ZulipUserId
from triagebot.core.notification_list import NotificationEntry


class NotificationStore(Protocol):
    """Per-owner ordered notification lists - implemented by shell."""
    async def snapshot(self, owner: GithubUserId) -> list[NotificationEntry]: ...
    async def acknowledge(
        self, owner: GithubUserId, identifier: Identifier,
    ) -> list[NotificationEntry]: ...
    async def add(
        self, owner: GithubUserId, url: str, description: str | None,
        *, origin_html: str = "", team_name: str | None = None,
    ) -> NotificationEntry: ...
    async def move(
        self, owner: GithubUserId, from_: Identifier, to: Identifier,
    ) -> tuple[Position, Position]: ...
    async def add_metadata(
        self, owner: GithubUserId, position: Position, description: str | None,
    ) -> None: ...


class MergeCommitStore(Protocol):
    """Merge commit records written by the post-processing step."""
    async def record(
        self, sha: str, parent_sha: str, repository: str,
        pr_number: int | None, merged_at: datetime,
    ) -> None: ...


class IdentityResolver(Protocol):
    """Maps chat identities to code-hosting identities and answers team questions."""
    async def to_github_id(self, zulip_id: ZulipUserId) -> GithubUserId | None: ...
    async def to_zulip_id(self, github_id: GithubUserId) -> ZulipUserId | None: ...
    async def is_team_member(self, github_id: GithubUserId) -> bool: ...
    async def team_member_logins(self, team: str) -> list[str] | None: ...
