"""GitHub Client - the handful of REST calls the handlers and post-processors make.

Invariants:
    - Every call goes through ResilientHttpClient: retries and backoff are never repeated here
    - 404 is an answer, not a failure, wherever the caller asks "does this exist?"
      (get_raw_file, get_user_id); everywhere else non-2xx is ExternalAPIError
    - Issue payloads are parsed into the same pydantic models as webhook payloads
"""

import logging

import httpx

from triagebot.config import Settings
from triagebot.core.domain_types import GithubUserId
from triagebot.infrastructure.http_client import ResilientHttpClient
from triagebot.schemas.github_event import Issue

logger = logging.getLogger(__name__)


class GithubClient:
    """GitHub REST API plus raw.githubusercontent.com for repository files."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        transport: httpx.AsyncBaseTransport | None = None,
        **retry_options,
    ):
        headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": "triagebot",
        }
        self.api = ResilientHttpClient(
            "GitHub", api_url, headers=headers, transport=transport, **retry_options,
        )
        self.raw = ResilientHttpClient(
            "GitHub", raw_url, headers=headers, transport=transport, **retry_options,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GithubClient":
        return cls(
            settings.github_token,
            settings.github_api_url,
            settings.github_raw_url,
            max_retries=settings.http_max_retries,
            base_delay_ms=settings.http_base_delay_ms,
            max_delay_ms=settings.http_max_delay_ms,
            timeout_seconds=settings.http_timeout_seconds,
        )

    async def get_raw_file(self, repository: str, path: str, ref: str = "HEAD") -> str | None:
        """File contents on `ref` (default branch by default), None when absent."""
        response = await self.raw.request("GET", f"/{repository}/{ref}/{path}")
        if response.status_code == 404:
            return None
        return self.raw.ensure_ok(response).text

    async def get_issue(self, repository: str, number: int) -> Issue:
        response = await self.api.request_ok("GET", f"/repos/{repository}/issues/{number}")
        issue = Issue.model_validate(response.json())
        issue.repository = repository
        return issue

    async def set_labels(self, repository: str, number: int, labels: list[str]) -> None:
        await self.api.request_ok(
            "PUT", f"/repos/{repository}/issues/{number}/labels",
            json={"labels": labels},
        )
        logger.info(
            f"Set labels on {repository}#{number}: {', '.join(labels) or '(none)'}",
            extra={"repo": repository},
        )

    async def post_comment(self, repository: str, number: int, body: str) -> None:
        await self.api.request_ok(
            "POST", f"/repos/{repository}/issues/{number}/comments",
            json={"body": body},
        )

    async def get_user_id(self, login: str) -> GithubUserId | None:
        response = await self.api.request("GET", f"/users/{login}")
        if response.status_code == 404:
            return None
        return GithubUserId(self.api.ensure_ok(response).json()["id"])

    async def get_commit_parent(self, repository: str, sha: str) -> str:
        """First parent of a commit (the base a merge commit was pushed on)."""
        response = await self.api.request_ok("GET", f"/repos/{repository}/commits/{sha}")
        return response.json()["parents"][0]["sha"]

    async def aclose(self) -> None:
        await self.api.aclose()
        await self.raw.aclose()
