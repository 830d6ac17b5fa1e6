"""Team API Client - identity and team data published as static JSON.

Invariants:
    - Implements IdentityResolver (core/repository_protocols.py)
    - Lookups that find nothing return None; transport / decode failures raise ExternalAPIError
    - The zulip map is a bijection zulip id <-> GitHub id; the first match wins if it is not

Design Decisions:
    - No caching: the documents are small and served from a CDN, and stale membership
      would grant label permissions after someone leaves a team
"""

import httpx

from triagebot.config import Settings
from triagebot.core.domain_types import GithubUserId, ZulipUserId
from triagebot.core.errors import ExternalAPIError
from triagebot.infrastructure.http_client import ResilientHttpClient


class TeamApiClient:
    """IdentityResolver over `zulip-map.json` and `teams.json`."""

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        **retry_options,
    ):
        self.http = ResilientHttpClient(
            "Team API", base_url, transport=transport, **retry_options,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "TeamApiClient":
        return cls(
            settings.team_api_url,
            max_retries=settings.http_max_retries,
            base_delay_ms=settings.http_base_delay_ms,
            max_delay_ms=settings.http_max_delay_ms,
            timeout_seconds=settings.http_timeout_seconds,
        )

    async def to_github_id(self, zulip_id: ZulipUserId) -> GithubUserId | None:
        users = await self._zulip_map()
        github_id = users.get(str(zulip_id))
        return None if github_id is None else GithubUserId(github_id)

    async def to_zulip_id(self, github_id: GithubUserId) -> ZulipUserId | None:
        users = await self._zulip_map()
        for zulip_id, mapped in users.items():
            if mapped == github_id:
                return ZulipUserId(int(zulip_id))
        return None

    async def is_team_member(self, github_id: GithubUserId) -> bool:
        teams = await self._json("/teams.json")
        return any(
            member.get("github_id") == github_id
            for team in teams.values()
            for member in team.get("members", [])
        )

    async def team_member_logins(self, team: str) -> list[str] | None:
        """GitHub logins of a team's members, None when no such team exists."""
        teams = await self._json("/teams.json")
        data = teams.get(team)
        if data is None:
            return None
        return [member["github"] for member in data.get("members", [])]

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _zulip_map(self) -> dict[str, int]:
        return (await self._json("/zulip-map.json"))["users"]

    async def _json(self, path: str) -> dict:
        response = await self.http.request_ok("GET", path)
        try:
            return response.json()
        except ValueError as e:
            raise ExternalAPIError("Team API", f"{path} is not valid JSON: {e}") from e
