"""Notification Handler - manages a user's notification list from Zulip.

Invariants:
    - The list owner is the sender's GitHub id, or the delegate's with `as <user>`
    - Every outcome a user can cause (unknown user, bad position, missing URL) is a reply,
      not an error; only collaborator failures leave as internal errors
    - A delegated command always tries to tell the delegate; failing to deliver that
      notice is logged and never changes the command's reply

Design Decisions:
    - Replies are returned as strings and sent back in the webhook response body,
      so no chat API call is needed for the common case
    - Store errors are caught here, per operation, so the reply can say which
      argument was wrong
"""

import logging

from triagebot.core import parse_notifications
from triagebot.core.command_input import CommandInput
from triagebot.core.commands import (
    Acknowledge,
    Add,
    Meta,
    Move,
    NotifCommand,
    NotifCommandKind,
    describe_notif_command,
)
from triagebot.core.domain_types import GithubUserId, ZulipUserId
from triagebot.core.errors import (
    CommandParseError,
    ExternalAPIError,
    HandlerMessageError,
    InvalidPositionError,
    NotificationNotFoundError,
)
from triagebot.core.format_messages import (
    acknowledged,
    delegated_notice,
    moved,
    parse_failed,
    unknown_zulip_user,
)
from triagebot.schemas.zulip_request import ZulipRequest
from triagebot.services.context import HandlerContext

logger = logging.getLogger(__name__)


class NotificationHandler:
    """`ack`, `add`, `move` and `meta` against the sender's notification list."""

    name = "manage_notifs"

    def parse_input(self, ctx: HandlerContext, request: ZulipRequest) -> NotifCommand | None:
        command_input = CommandInput(request.data, ctx.zulip_username)
        try:
            command = command_input.parse_zulip_command(request.message.is_private)
        except CommandParseError as e:
            if e.family != parse_notifications.FAMILY:
                return None
            raise HandlerMessageError(parse_failed("notifications", e.message)) from e
        return command if isinstance(command, NotifCommand) else None

    async def execute(
        self, ctx: HandlerContext, request: ZulipRequest, command: NotifCommand,
    ) -> str:
        if command.user_override is not None:
            return await self._execute_as(ctx, request, command)

        sender = ZulipUserId(request.message.sender_id)
        try:
            github_id = await ctx.identities.to_github_id(sender)
        except ExternalAPIError as e:
            return f"Failed to query team API: {e.message}"
        if github_id is None:
            return unknown_zulip_user(sender)
        return await self._run(ctx, github_id, command.command)

    async def _execute_as(
        self, ctx: HandlerContext, request: ZulipRequest, command: NotifCommand,
    ) -> str:
        """Run the command on the delegate's list and tell the delegate about it."""
        login = command.user_override
        github_id = await ctx.github.get_user_id(login)
        if github_id is None:
            return "Can only authorize for other GitHub users."

        try:
            zulip_id = await ctx.identities.to_zulip_id(github_id)
        except ExternalAPIError as e:
            return f"Could not find Zulip ID for GitHub id {github_id}: {e.message}"
        if zulip_id is None:
            return f"Could not find Zulip ID for GitHub ID: {github_id}"

        try:
            email = await ctx.zulip.get_member_email(zulip_id)
        except ExternalAPIError as e:
            return f"Failed to get list of zulip users: {e.message}."
        if email is None:
            return "Could not find Zulip user email."

        output = await self._run(ctx, github_id, command.command)
        message = request.message
        notice = delegated_notice(
            message.sender_full_name, message.sender_short_name,
            describe_notif_command(command.command), output,
        )
        try:
            await ctx.zulip.send_private(zulip_id, email, notice)
        except Exception as e:
            logger.error(
                f"Failed to notify {login} about a command run as them: {e}",
                extra={"owner_id": github_id, "handler": self.name},
                exc_info=True,
            )
        return output

    async def _run(
        self, ctx: HandlerContext, owner: GithubUserId, command: NotifCommandKind,
    ) -> str:
        store = ctx.notifications
        if isinstance(command, Acknowledge):
            try:
                removed = await store.acknowledge(owner, command.identifier)
            except NotificationNotFoundError as e:
                return f"Failed to acknowledge {command.identifier}: {e.message}"
            return acknowledged(removed)

        if isinstance(command, Add):
            await store.add(owner, command.url, command.description)
            return "Created!"

        if isinstance(command, Move):
            try:
                from_, to = await store.move(owner, command.from_, command.to)
            except (InvalidPositionError, NotificationNotFoundError) as e:
                return (
                    f"Failed to move {command.from_} to "
                    f"{command.to}: {e.message}"
                )
            return moved(from_, to)

        if isinstance(command, Meta):
            try:
                await store.add_metadata(owner, command.position, command.description)
            except InvalidPositionError as e:
                return f"Failed to add metadata to {command.position}: {e.message}"
            return "Added metadata!"

        raise TypeError(f"unknown notification command {command!r}")
