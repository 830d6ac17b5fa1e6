"""Handler Dispatch - tests for handle_github / handle_zulip routing.

Tests cover:
    - No recognised command: nothing runs, config errors stay silent
    - Missing section: "feature not enabled" message, execute never called
    - MISSING / MALFORMED config surface as messages; TRANSIENT as internal error
    - execute failures are wrapped as HandlerInternalError; message errors pass through
    - Post-processors run even when dispatch aborts, and their failures are swallowed
    - Zulip: first matching handler wins and its reply is returned
"""

from unittest.mock import AsyncMock

import pytest

from triagebot.core.errors import (
    ConfigErrorKind,
    ConfigurationError,
    HandlerInternalError,
    HandlerMessageError,
)
from triagebot.core.format_messages import feature_not_enabled
from triagebot.schemas.repo_config import RepoConfig
from triagebot.services.handler_dispatch import handle_github, handle_zulip


class _FakeHandler:
    def __init__(self, name="relabel", parsed="cmd", error=None, reply=None):
        self.name = name
        self.parsed = parsed
        self.error = error
        self.reply = reply
        self.executed = []

    def parse_input(self, ctx, event, *rest):
        return self.parsed

    async def execute(self, ctx, *args):
        self.executed.append(args)
        if self.error is not None:
            raise self.error
        return self.reply


def _processors(*names):
    return tuple((name, AsyncMock()) for name in names)


# --- GitHub ------------------------------------------------------------------------

async def test_runs_handler_with_its_section(ctx, make_event, repo_config):
    handler = _FakeHandler()
    event = make_event("@rustbot label +T-lang")
    await handle_github(ctx, event, handlers=(handler,), post_processors=())
    assert handler.executed == [(repo_config.relabel, event, "cmd")]


async def test_no_command_runs_nothing_even_without_config(ctx, make_event):
    ctx.configs.get.side_effect = ConfigurationError(ConfigErrorKind.MISSING, "no config")
    handler = _FakeHandler(parsed=None)
    await handle_github(ctx, make_event("hello"), handlers=(handler,), post_processors=())
    assert handler.executed == []


async def test_missing_section_reports_feature_not_enabled(ctx, make_event):
    ctx.configs.get.return_value = RepoConfig()
    handler = _FakeHandler()
    with pytest.raises(HandlerMessageError) as exc:
        await handle_github(ctx, make_event(), handlers=(handler,), post_processors=())
    assert exc.value.message == feature_not_enabled("relabel")
    assert handler.executed == []


@pytest.mark.parametrize("kind", [ConfigErrorKind.MISSING, ConfigErrorKind.MALFORMED])
async def test_owner_config_errors_are_messages(ctx, make_event, kind):
    ctx.configs.get.side_effect = ConfigurationError(kind, "fix your config")
    handler = _FakeHandler()
    with pytest.raises(HandlerMessageError, match="fix your config"):
        await handle_github(ctx, make_event(), handlers=(handler,), post_processors=())
    assert handler.executed == []


async def test_transient_config_error_is_internal(ctx, make_event):
    ctx.configs.get.side_effect = ConfigurationError(ConfigErrorKind.TRANSIENT, "GitHub down")
    with pytest.raises(HandlerInternalError):
        await handle_github(ctx, make_event(), handlers=(_FakeHandler(),), post_processors=())


async def test_execute_failure_is_wrapped(ctx, make_event):
    boom = RuntimeError("boom")
    with pytest.raises(HandlerInternalError) as exc:
        await handle_github(
            ctx, make_event(), handlers=(_FakeHandler(error=boom),), post_processors=(),
        )
    assert exc.value.cause is boom
    assert exc.value.__cause__ is boom


async def test_execute_message_error_passes_through(ctx, make_event):
    handler = _FakeHandler(error=HandlerMessageError("not allowed"))
    with pytest.raises(HandlerMessageError, match="not allowed"):
        await handle_github(ctx, make_event(), handlers=(handler,), post_processors=())


async def test_post_processors_run_after_abort(ctx, make_event):
    ctx.configs.get.return_value = RepoConfig()
    processors = _processors("first", "second")
    event = make_event()
    with pytest.raises(HandlerMessageError):
        await handle_github(ctx, event, handlers=(_FakeHandler(),), post_processors=processors)
    for _, process in processors:
        process.assert_awaited_once_with(ctx, event)


async def test_post_processor_failure_is_swallowed(ctx, make_event):
    failing = AsyncMock(side_effect=RuntimeError("db gone"))
    after = AsyncMock()
    await handle_github(
        ctx, make_event(), handlers=(),
        post_processors=(("failing", failing), ("after", after)),
    )
    after.assert_awaited_once()


async def test_config_fetched_once_per_event(ctx, make_event):
    handlers = (_FakeHandler(), _FakeHandler())
    await handle_github(ctx, make_event(), handlers=handlers, post_processors=())
    ctx.configs.get.assert_awaited_once_with("rust-lang/rust")


# --- Zulip -------------------------------------------------------------------------

async def test_zulip_first_match_wins(ctx, make_zulip_request):
    skipped = _FakeHandler(parsed=None)
    first = _FakeHandler(reply="first!")
    second = _FakeHandler(reply="second!")
    reply = await handle_zulip(ctx, make_zulip_request("ack 1"), handlers=(skipped, first, second))
    assert reply == "first!"
    assert second.executed == []


async def test_zulip_no_match_is_none(ctx, make_zulip_request):
    assert await handle_zulip(
        ctx, make_zulip_request("hello"), handlers=(_FakeHandler(parsed=None),),
    ) is None


async def test_zulip_execute_failure_is_wrapped(ctx, make_zulip_request):
    with pytest.raises(HandlerInternalError):
        await handle_zulip(
            ctx, make_zulip_request("ack 1"),
            handlers=(_FakeHandler(error=KeyError("x")),),
        )
