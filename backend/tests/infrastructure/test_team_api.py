"""Team API Client - tests for identity mapping and team lookups.

Tests cover:
    - zulip id <-> GitHub id both ways, None when unmapped
    - Membership in any team
    - Team member logins, None for unknown teams
    - Invalid JSON becomes ExternalAPIError
"""

import httpx
import pytest

from triagebot.core.errors import ExternalAPIError
from triagebot.infrastructure.team_api import TeamApiClient

ZULIP_MAP = {"users": {"100": 1, "200": 2}}
TEAMS = {
    "compiler": {"members": [{"github": "alice", "github_id": 1}, {"github": "bob", "github_id": 2}]},
    "lang": {"members": [{"github": "carol", "github_id": 3}]},
}


def _client(documents):
    def handler(request):
        body = documents[request.url.path]
        if isinstance(body, str):
            return httpx.Response(200, text=body)
        return httpx.Response(200, json=body)

    return TeamApiClient(
        "https://team.test/v1", transport=httpx.MockTransport(handler), base_delay_ms=0,
    )


@pytest.fixture
def team():
    return _client({"/v1/zulip-map.json": ZULIP_MAP, "/v1/teams.json": TEAMS})


async def test_to_github_id(team):
    assert await team.to_github_id(100) == 1
    assert await team.to_github_id(999) is None


async def test_to_zulip_id(team):
    assert await team.to_zulip_id(2) == 200
    assert await team.to_zulip_id(9) is None


async def test_is_team_member(team):
    assert await team.is_team_member(3)
    assert not await team.is_team_member(9)


async def test_team_member_logins(team):
    assert await team.team_member_logins("compiler") == ["alice", "bob"]
    assert await team.team_member_logins("nobody") is None


async def test_invalid_json():
    team = _client({"/v1/teams.json": "<html>"})
    with pytest.raises(ExternalAPIError, match="not valid JSON"):
        await team.is_team_member(1)
