"""GitHub Event Payloads - tests for parse_event and the shared accessors.

Tests cover:
    - issue_comment and issues payloads parse into their models
    - Unsupported event types return None
    - comment_body / html_url / user read from the comment or the issue
    - The issue learns its repository name
"""

import pytest
from pydantic import ValidationError

from triagebot.schemas.github_event import IssueCommentEvent, IssuesEvent, parse_event

REPO = {"full_name": "rust-lang/rust"}
ISSUE = {
    "number": 12,
    "title": "ICE in borrowck",
    "body": "@rustbot label +I-ICE",
    "html_url": "https://github.com/rust-lang/rust/issues/12",
    "user": {"login": "alice", "id": 1},
    "labels": [{"name": "T-compiler"}],
}


def test_issue_comment_event():
    event = parse_event("issue_comment", {
        "action": "created",
        "issue": ISSUE,
        "comment": {
            "body": "@rustbot label -T-compiler",
            "html_url": "https://github.com/rust-lang/rust/issues/12#issuecomment-1",
            "user": {"login": "bob", "id": 2},
        },
        "repository": REPO,
        "sender": {"login": "bob"},
    })
    assert isinstance(event, IssueCommentEvent)
    assert event.comment_body() == "@rustbot label -T-compiler"
    assert event.user().login == "bob"
    assert event.html_url().endswith("#issuecomment-1")
    assert event.repo_name() == "rust-lang/rust"
    assert event.issue.repository == "rust-lang/rust"
    assert event.issue.label_names() == ["T-compiler"]


def test_issues_event_reads_from_issue():
    event = parse_event("issues", {"action": "opened", "issue": ISSUE, "repository": REPO})
    assert isinstance(event, IssuesEvent)
    assert event.comment_body() == "@rustbot label +I-ICE"
    assert event.user().login == "alice"
    assert event.html_url() == ISSUE["html_url"]
    assert not event.issue.is_pr


def test_pull_request_flag():
    event = parse_event("issues", {
        "action": "opened",
        "issue": {**ISSUE, "pull_request": {"url": "x"}},
        "repository": REPO,
    })
    assert event.issue.is_pr


def test_unsupported_event_type_is_none():
    assert parse_event("push", {"ref": "refs/heads/main"}) is None


def test_missing_fields_raise():
    with pytest.raises(ValidationError):
        parse_event("issues", {"action": "opened", "repository": REPO})
