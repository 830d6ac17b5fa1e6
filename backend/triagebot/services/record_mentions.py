"""Record Mentions - adds an entry to the notification list of everyone pinged on GitHub.

Invariants:
    - Only created comments and opened issues are scanned; edits never ping twice
    - Team mentions (@org/team) expand to the team's members; unknown teams are skipped
    - The author and the bot itself are never notified, and each user at most once per event
    - Runs as a post-processor: every exception is the dispatcher's to log
"""

import logging

from triagebot.core.domain_types import CommentAction, IssuesAction
from triagebot.core.mentions import extract_mentions
from triagebot.schemas.github_event import Event, IssueCommentEvent
from triagebot.services.context import HandlerContext

logger = logging.getLogger(__name__)


def _is_new(event: Event) -> bool:
    if isinstance(event, IssueCommentEvent):
        return event.action == CommentAction.CREATED
    return event.action == IssuesAction.OPENED


async def record_mentions(ctx: HandlerContext, event: Event) -> None:
    body = event.comment_body()
    if not body or not _is_new(event):
        return

    skip = {event.user().login.lower(), ctx.github_username.lower()}
    for mention in extract_mentions(body):
        if mention.is_team:
            logins = await ctx.identities.team_member_logins(mention.team)
            if logins is None:
                logger.info(f"Skipping unknown team {mention}", extra={"repo": event.repo_name()})
                continue
        else:
            logins = [mention.login]

        for login in logins:
            if login.lower() in skip:
                continue
            skip.add(login.lower())
            github_id = await ctx.github.get_user_id(login)
            if github_id is None:
                continue
            await ctx.notifications.add(
                github_id, event.html_url(), event.issue.title,
                origin_html=body, team_name=mention.team,
            )
