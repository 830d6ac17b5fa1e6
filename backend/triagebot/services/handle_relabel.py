"""Relabel Handlers - let anyone change issue labels, within the repository's allow-list.

Invariants:
    - GitHub: only newly created comments and newly opened issues are parsed, so editing
      a comment or an issue body never re-runs a command
    - Team members may set any label; others only labels allowed by [relabel] allow-unauthenticated
    - The first denied label aborts the whole command with an error comment; no label is applied
    - The label set is written back only when it actually changed
    - Identity and membership lookup failures degrade to TeamMembership.UNKNOWN, never to an error
    - Zulip: a missing or malformed config is replied with its own message

Design Decisions:
    - Two handlers (GitHub, Zulip) over one shared apply step: only where the issue,
      the config and the caller's identity come from differs
"""

import logging

from triagebot.core import parse_relabel
from triagebot.core.command_input import CommandInput
from triagebot.core.commands import RelabelCommand
from triagebot.core.domain_types import (
    CommentAction,
    GithubUserId,
    IssuesAction,
    TeamMembership,
    ZulipUserId,
)
from triagebot.core.enforce_labels import apply_label_deltas, check_filter, denial_message
from triagebot.core.errors import (
    CommandParseError,
    ConfigErrorKind,
    ConfigurationError,
    ExternalAPIError,
    HandlerMessageError,
)
from triagebot.core.format_messages import error_comment, feature_not_enabled_in, parse_failed
from triagebot.schemas.github_event import Event, Issue, IssueCommentEvent, IssuesEvent
from triagebot.schemas.repo_config import RelabelConfig
from triagebot.schemas.zulip_request import ZulipRequest
from triagebot.services.context import HandlerContext

logger = logging.getLogger(__name__)


def _relabel_only(parse, source_url: str | None = None) -> RelabelCommand | None:
    """Run a CommandInput parse, keeping relabel commands and relabel parse errors."""
    try:
        command = parse()
    except CommandParseError as e:
        if e.family != parse_relabel.FAMILY:
            return None
        raise HandlerMessageError(parse_failed("label", e.message, source_url)) from e
    return command if isinstance(command, RelabelCommand) else None


class _LabelUpdater:
    name = "relabel"

    async def _membership(
        self, ctx: HandlerContext, github_id: GithubUserId | None,
    ) -> TeamMembership:
        if github_id is None:
            return TeamMembership.UNKNOWN
        try:
            is_member = await ctx.identities.is_team_member(github_id)
        except ExternalAPIError as e:
            logger.warning(f"Failed to check team membership of {github_id}: {e.message}")
            return TeamMembership.UNKNOWN
        return TeamMembership.MEMBER if is_member else TeamMembership.OUTSIDER

    async def _apply(
        self, ctx: HandlerContext, config: RelabelConfig, issue: Issue,
        membership: TeamMembership, command: RelabelCommand, author: str,
    ) -> str | None:
        """Check every delta, then write the labels. Returns the denial, if any."""
        for delta in command.deltas:
            denial = denial_message(
                delta.label,
                check_filter(delta.label, config.allow_unauthenticated, membership),
            )
            if denial is not None:
                await ctx.github.post_comment(
                    issue.repository, issue.number,
                    error_comment(author, denial, ctx.github_username),
                )
                return denial

        labels, changed = apply_label_deltas(issue.label_names(), command.deltas)
        if changed:
            await ctx.github.set_labels(issue.repository, issue.number, labels)
            logger.info(
                f"Relabeled #{issue.number}: {' '.join(str(d) for d in command.deltas)}",
                extra={"repo": issue.repository, "handler": self.name},
            )
        return None


class RelabelHandler(_LabelUpdater):
    """`@bot label +a -b` in issue comments and issue bodies."""

    def parse_input(
        self, ctx: HandlerContext, event: Event, config: RelabelConfig | None,
    ) -> RelabelCommand | None:
        if isinstance(event, IssueCommentEvent) and event.action != CommentAction.CREATED:
            return None
        if isinstance(event, IssuesEvent) and event.action != IssuesAction.OPENED:
            return None
        body = event.comment_body()
        if not body:
            return None
        command_input = CommandInput(body, ctx.github_username)
        return _relabel_only(command_input.parse_github_command, event.html_url())

    async def execute(
        self, ctx: HandlerContext, config: RelabelConfig, event: Event,
        command: RelabelCommand,
    ) -> None:
        user = event.user()
        github_id = GithubUserId(user.id) if user.id is not None else None
        membership = await self._membership(ctx, github_id)
        await self._apply(ctx, config, event.issue, membership, command, user.login)


class ZulipRelabelHandler(_LabelUpdater):
    """`@**bot** label owner/repo#123 +a -b` from chat; the issue reference is required."""

    async def _sender_github_id(
        self, ctx: HandlerContext, sender_id: int,
    ) -> GithubUserId | None:
        try:
            return await ctx.identities.to_github_id(ZulipUserId(sender_id))
        except ExternalAPIError as e:
            logger.warning(f"Failed to map Zulip user {sender_id} to GitHub: {e.message}")
            return None

    def parse_input(self, ctx: HandlerContext, request: ZulipRequest) -> RelabelCommand | None:
        command_input = CommandInput(request.data, ctx.zulip_username)
        return _relabel_only(
            lambda: command_input.parse_zulip_command(request.message.is_private),
        )

    async def execute(
        self, ctx: HandlerContext, request: ZulipRequest, command: RelabelCommand,
    ) -> str | None:
        if command.issue is None:
            return "No issue reference given"
        repository = command.issue.repository
        issue = await ctx.github.get_issue(repository, command.issue.number)
        try:
            repo_config = await ctx.configs.get(repository)
        except ConfigurationError as e:
            if e.kind is ConfigErrorKind.TRANSIENT:
                raise
            return e.message
        if repo_config.relabel is None:
            return feature_not_enabled_in(self.name, repository)

        membership = await self._membership(
            ctx, await self._sender_github_id(ctx, request.message.sender_id),
        )
        return await self._apply(
            ctx, repo_config.relabel, issue, membership, command, issue.user.login,
        )
