"""Webhook Routes - tests for the HTTP surface via the ASGI test client.

Tests cover:
    - /github-hook: ignored event types, successful dispatch, error comments, internal errors,
      invalid payloads
    - /zulip-hook: replies, no-reply, message errors, internal failures
    - /api/v1/notifications listing
    - Health and readiness probes
"""

from triagebot.core.format_messages import INTERNAL_FAILURE_REPLY
from triagebot.core.domain_types import GithubUserId
from triagebot.core.errors import ConfigErrorKind, ConfigurationError

ISSUE = {
    "number": 12,
    "title": "ICE",
    "html_url": "https://github.com/rust-lang/rust/issues/12",
    "user": {"login": "reporter", "id": 99},
    "labels": [],
}


def _comment_payload(body: str, action: str = "created"):
    return {
        "action": action,
        "issue": ISSUE,
        "comment": {
            "body": body,
            "html_url": "https://github.com/rust-lang/rust/issues/12#issuecomment-1",
            "user": {"login": "alice", "id": 1},
        },
        "repository": {"full_name": "rust-lang/rust"},
    }


def _zulip_payload(data: str, sender_id: int = 100):
    return {
        "data": data,
        "token": "t",
        "message": {
            "sender_id": sender_id,
            "sender_email": "user@zulip.example",
            "recipient_id": 1,
            "type": "private",
        },
    }


async def _github(client, payload, event="issue_comment"):
    return await client.post("/github-hook", json=payload, headers={"X-GitHub-Event": event})


# --- /github-hook ------------------------------------------------------------------

async def test_unsupported_event_is_ignored(client):
    response = await _github(client, {"zen": "Keep it simple"}, event="ping")
    assert response.status_code == 200
    assert response.json() == {"status": "ignored"}


async def test_relabel_comment(client, ctx):
    ctx.identities.is_team_member.return_value = False
    response = await _github(client, _comment_payload("@rustbot label +T-lang"))
    assert response.json() == {"status": "ok"}
    ctx.github.set_labels.assert_awaited_once_with("rust-lang/rust", 12, ["T-lang"])


async def test_comment_without_command(client, ctx):
    response = await _github(client, _comment_payload("just chatting"))
    assert response.json() == {"status": "ok"}
    ctx.github.post_comment.assert_not_awaited()


async def test_message_error_becomes_comment(client, ctx):
    ctx.configs.get.side_effect = ConfigurationError(ConfigErrorKind.MISSING, "not enabled")
    response = await _github(client, _comment_payload("@rustbot label +T-lang"))
    assert response.json() == {"status": "error_reported"}
    repository, number, body = ctx.github.post_comment.await_args.args
    assert (repository, number) == ("rust-lang/rust", 12)
    assert body.startswith("@alice\n\n:warning: **Error**: not enabled")


async def test_internal_error_is_opaque_500(client, ctx):
    ctx.identities.is_team_member.return_value = True
    ctx.github.set_labels.side_effect = RuntimeError("secret detail")
    response = await _github(client, _comment_payload("@rustbot label +T-lang"))
    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "HANDLER_INTERNAL"
    assert "secret detail" not in response.text


async def test_invalid_payload_is_400(client):
    response = await _github(client, {"action": "created"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_missing_event_header_is_400(client):
    response = await client.post("/github-hook", json=_comment_payload("hi"))
    assert response.status_code == 400


# --- /zulip-hook -------------------------------------------------------------------

async def test_zulip_command_reply(client, ctx):
    ctx.identities.to_github_id.return_value = GithubUserId(7)
    response = await client.post("/zulip-hook", json=_zulip_payload('add "https://x/1" look'))
    assert response.status_code == 200
    assert response.json() == {"content": "Created!"}


async def test_zulip_no_command(client):
    response = await client.post("/zulip-hook", json=_zulip_payload("hello there"))
    assert response.json() == {"response_not_required": True}


async def test_zulip_parse_error_is_replied(client):
    response = await client.post("/zulip-hook", json=_zulip_payload("ack 0"))
    assert response.json()["content"].startswith("Parsing notifications command failed")


async def test_zulip_internal_failure(client, ctx):
    ctx.github.get_issue.side_effect = RuntimeError("GitHub exploded")
    response = await client.post(
        "/zulip-hook", json=_zulip_payload("label rust-lang/rust#12 +T-lang"),
    )
    assert response.status_code == 200
    assert response.json() == {"content": INTERNAL_FAILURE_REPLY}


# --- listing and health ------------------------------------------------------------

async def test_notifications_listing(client, store):
    await store.add(GithubUserId(7), "https://x/1", "first")
    await store.add(GithubUserId(7), "https://x/2", None)
    response = await client.get("/api/v1/notifications/7")
    body = response.json()
    assert body["user_id"] == 7
    assert [n["position"] for n in body["notifications"]] == [1, 2]
    assert body["notifications"][0]["short_description"] == "first"


async def test_health(client):
    response = await client.get("/api/v1/health/")
    assert response.json()["status"] == "healthy"


async def test_ready(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "healthy"
