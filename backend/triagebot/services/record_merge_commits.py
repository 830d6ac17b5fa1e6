"""Record Merge Commits - remembers what the merge bot pushed, and on top of what.

Invariants:
    - Only newly created comments by the configured merge bot are considered
    - A comment counts only if it reports a successful test AND names the pushed sha
    - Recording the same sha twice overwrites the row (upsert)
"""

import logging
import re
from datetime import datetime, timezone

from triagebot.core.domain_types import CommentAction
from triagebot.schemas.github_event import Event, IssueCommentEvent
from triagebot.services.context import HandlerContext

logger = logging.getLogger(__name__)

_PUSHING_RE = re.compile(r"Pushing ([0-9a-f]{40}) to ([\w./-]+)")


def parse_merge_comment(body: str) -> tuple[str, str] | None:
    """(sha, branch) from a merge bot's success comment, None for any other comment."""
    if "Test successful" not in body:
        return None
    match = _PUSHING_RE.search(body)
    if match is None:
        return None
    return match.group(1), match.group(2).rstrip(".")


async def record_merge_commits(ctx: HandlerContext, event: Event) -> None:
    if not isinstance(event, IssueCommentEvent) or event.action != CommentAction.CREATED:
        return
    if event.user().login != ctx.merge_bot_username:
        return
    pushed = parse_merge_comment(event.comment_body() or "")
    if pushed is None:
        return

    sha, branch = pushed
    repository = event.repo_name()
    parent_sha = await ctx.github.get_commit_parent(repository, sha)
    logger.info(f"{event.issue.number} merged as {sha} on {branch}", extra={"repo": repository})
    await ctx.merge_commits.record(
        sha, parent_sha, repository, event.issue.number, datetime.now(timezone.utc),
    )
