"""Handler Dispatch - explicit routing of inbound events to feature handlers.

Invariants:
    - Every handler is registered in GITHUB_HANDLERS / ZULIP_HANDLERS - no auto-discovery
    - parse_input is synchronous and side-effect free; only execute touches collaborators
    - GitHub: a recognised command runs only when the repository config loaded AND has
      the handler's section; otherwise dispatch aborts with a message (or internal error
      for transient config failures) and execute is never called
    - Anything execute raises leaves dispatch as HandlerMessageError or HandlerInternalError
    - Post-processors run after the handler loop, even when it aborted, each in its own
      try/except: their failures are logged and never reach the caller
    - Zulip: first handler whose parse_input yields an input executes; the loop stops there

Design Decisions:
    - Explicit tuples over a plugin registry: every handler visible in one place
    - Repository config fetched once per event, before any handler parses
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from triagebot.core.errors import (
    ConfigErrorKind,
    ConfigurationError,
    HandlerInternalError,
    HandlerMessageError,
)
from triagebot.core.format_messages import feature_not_enabled
from triagebot.schemas.github_event import Event
from triagebot.schemas.repo_config import FeatureConfig, RepoConfig
from triagebot.schemas.zulip_request import ZulipRequest
from triagebot.services.context import HandlerContext
from triagebot.services.handle_notifications import NotificationHandler
from triagebot.services.handle_relabel import RelabelHandler, ZulipRelabelHandler
from triagebot.services.record_mentions import record_mentions
from triagebot.services.record_merge_commits import record_merge_commits

logger = logging.getLogger(__name__)


class GithubHandler(Protocol):
    name: str

    def parse_input(
        self, ctx: HandlerContext, event: Event, config: FeatureConfig | None,
    ) -> Any | None: ...

    async def execute(
        self, ctx: HandlerContext, config: FeatureConfig, event: Event, input: Any,
    ) -> None: ...


class ZulipHandler(Protocol):
    name: str

    def parse_input(self, ctx: HandlerContext, request: ZulipRequest) -> Any | None: ...

    async def execute(
        self, ctx: HandlerContext, request: ZulipRequest, input: Any,
    ) -> str | None: ...


PostProcessor = Callable[[HandlerContext, Event], Awaitable[None]]

# ADR: order is part of the contract - adding a handler means editing these tuples
GITHUB_HANDLERS: tuple[GithubHandler, ...] = (
    RelabelHandler(),
)
ZULIP_HANDLERS: tuple[ZulipHandler, ...] = (
    ZulipRelabelHandler(),
    NotificationHandler(),
)
POST_PROCESSORS: tuple[tuple[str, PostProcessor], ...] = (
    ("notification", record_mentions),
    ("merge_commits", record_merge_commits),
)


async def handle_github(
    ctx: HandlerContext, event: Event,
    handlers: tuple[GithubHandler, ...] = GITHUB_HANDLERS,
    post_processors: tuple[tuple[str, PostProcessor], ...] = POST_PROCESSORS,
) -> None:
    """Run every GitHub handler for one event, then the post-processors."""
    repository = event.repo_name()
    config: RepoConfig | None = None
    config_error: ConfigurationError | None = None
    try:
        config = await ctx.configs.get(repository)
    except ConfigurationError as e:
        config_error = e

    try:
        for handler in handlers:
            section = config.section(handler.name) if config is not None else None
            parsed = handler.parse_input(ctx, event, section)
            if parsed is None:
                continue
            if config_error is not None:
                _raise_config_error(config_error, handler.name, repository)
            if section is None:
                raise HandlerMessageError(
                    feature_not_enabled(handler.name, ctx.config_file_name),
                )
            await _execute(handler.name, repository, handler.execute(ctx, section, event, parsed))
    finally:
        await _run_post_processors(ctx, event, post_processors)


async def handle_zulip(
    ctx: HandlerContext, request: ZulipRequest,
    handlers: tuple[ZulipHandler, ...] = ZULIP_HANDLERS,
) -> str | None:
    """Run the first Zulip handler that recognises the message. Returns its reply."""
    for handler in handlers:
        parsed = handler.parse_input(ctx, request)
        if parsed is None:
            continue
        return await _execute(handler.name, None, handler.execute(ctx, request, parsed))
    return None


def _raise_config_error(error: ConfigurationError, handler: str, repository: str) -> None:
    if error.kind is ConfigErrorKind.TRANSIENT:
        logger.error(
            f"Config for {handler} unavailable: {error.message}",
            extra={"repo": repository, "handler": handler, "error_code": error.code},
        )
        raise HandlerInternalError(error) from error
    raise HandlerMessageError(error.message) from error


async def _execute(handler: str, repository: str | None, call: Awaitable[Any]) -> Any:
    try:
        return await call
    except HandlerMessageError:
        raise
    except Exception as e:
        logger.error(
            f"Handler {handler} failed: {e}",
            extra={"repo": repository, "handler": handler},
            exc_info=True,
        )
        raise HandlerInternalError(e) from e


async def _run_post_processors(
    ctx: HandlerContext, event: Event,
    post_processors: tuple[tuple[str, PostProcessor], ...],
) -> None:
    for name, process in post_processors:
        try:
            await process(ctx, event)
        except Exception as e:
            logger.error(
                f"Post-processor {name} failed: {e}",
                extra={"repo": event.repo_name(), "handler": name},
                exc_info=True,
            )
