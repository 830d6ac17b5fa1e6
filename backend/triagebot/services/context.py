"""Handler Context - the collaborators every handler receives, built once at startup.

Invariants:
    - Handlers reach the outside world ONLY through the fields of HandlerContext
    - Every field is typed by a Protocol: tests pass fakes, main.py passes the real clients

Design Decisions:
    - Protocols for the HTTP-facing collaborators live here rather than in core/:
      they speak the pydantic schemas (Issue, RepoConfig), which core does not import
"""

from dataclasses import dataclass
from typing import Protocol

from triagebot.core.domain_types import GithubUserId, ZulipUserId
from triagebot.core.repository_protocols import (
    IdentityResolver,
    MergeCommitStore,
    NotificationStore,
)
from triagebot.schemas.github_event import Issue
from triagebot.schemas.repo_config import RepoConfig


class GithubApi(Protocol):
    async def get_issue(self, repository: str, number: int) -> Issue: ...
    async def set_labels(self, repository: str, number: int, labels: list[str]) -> None: ...
    async def post_comment(self, repository: str, number: int, body: str) -> None: ...
    async def get_user_id(self, login: str) -> GithubUserId | None: ...
    async def get_commit_parent(self, repository: str, sha: str) -> str: ...


class ChatApi(Protocol):
    async def send_private(self, user_id: ZulipUserId, email: str, content: str) -> None: ...
    async def get_member_email(self, user_id: ZulipUserId) -> str | None: ...


class ConfigProvider(Protocol):
    """Loads a repository's triagebot.toml; raises ConfigurationError on failure."""
    async def get(self, repository: str) -> RepoConfig: ...


@dataclass
class HandlerContext:
    github: GithubApi
    zulip: ChatApi
    identities: IdentityResolver
    notifications: NotificationStore
    merge_commits: MergeCommitStore
    configs: ConfigProvider
    github_username: str = "rustbot"
    zulip_username: str = "triagebot"
    merge_bot_username: str = "bors"
    config_file_name: str = "triagebot.toml"
