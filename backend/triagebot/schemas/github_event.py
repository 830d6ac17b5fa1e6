"""GitHub Webhook Payloads - the subset of issue / issue_comment events the bot reads.

Invariants:
    - Only `issues` and `issue_comment` payloads are modelled; other event types are ignored upstream
    - Every Event exposes the same accessors (comment_body, html_url, user, issue, repo_name)
      so handlers never branch on the payload class to read common fields
    - Extra payload fields are ignored
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class User(_Payload):
    login: str
    id: int | None = None


class Label(_Payload):
    name: str


class Repository(_Payload):
    full_name: str


class Issue(_Payload):
    number: int
    title: str = ""
    body: str | None = None
    html_url: str
    user: User
    labels: list[Label] = []
    # GitHub sets pull_request on issues that are PRs
    pull_request: dict | None = None
    repository: str = ""

    @property
    def is_pr(self) -> bool:
        return self.pull_request is not None

    def label_names(self) -> list[str]:
        return [label.name for label in self.labels]


class Comment(_Payload):
    body: str = ""
    html_url: str
    user: User


class IssueCommentEvent(_Payload):
    kind: Literal["issue_comment"] = "issue_comment"
    action: str
    issue: Issue
    comment: Comment
    repository: Repository

    def comment_body(self) -> str | None:
        return self.comment.body

    def html_url(self) -> str:
        return self.comment.html_url

    def user(self) -> User:
        return self.comment.user

    def repo_name(self) -> str:
        return self.repository.full_name


class IssuesEvent(_Payload):
    kind: Literal["issues"] = "issues"
    action: str
    issue: Issue
    repository: Repository

    def comment_body(self) -> str | None:
        return self.issue.body

    def html_url(self) -> str:
        return self.issue.html_url

    def user(self) -> User:
        return self.issue.user

    def repo_name(self) -> str:
        return self.repository.full_name


Event = IssueCommentEvent | IssuesEvent

EVENT_TYPES: dict[str, type[IssueCommentEvent] | type[IssuesEvent]] = {
    "issue_comment": IssueCommentEvent,
    "issues": IssuesEvent,
}


def parse_event(event_type: str, payload: dict) -> Event | None:
    """Build an Event from a webhook body, or None for event types the bot ignores."""
    model = EVENT_TYPES.get(event_type)
    if model is None:
        return None
    event = model.model_validate(payload)
    event.issue.repository = event.repository.full_name
    return event
