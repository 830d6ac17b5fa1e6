"""GitHub Webhook - POST /github-hook, one call per delivered event.

Invariants:
    - The event type comes from the X-GitHub-Event header; unsupported types are
      acknowledged with 200 and ignored
    - HandlerMessageError becomes an error comment on the issue that triggered it
    - HandlerInternalError propagates to the global TriageError handler (opaque 500)

Design Decisions:
    - Payload parsed into pydantic models here, so handlers never see raw dicts
"""

import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from triagebot.api.dependencies import get_context
from triagebot.core.errors import HandlerMessageError
from triagebot.core.format_messages import error_comment
from triagebot.schemas.github_event import parse_event
from triagebot.services.context import HandlerContext
from triagebot.services.handler_dispatch import handle_github

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])


@router.post("/github-hook")
async def github_hook(
    request: Request,
    x_github_event: str = Header(...),
    ctx: HandlerContext = Depends(get_context),
):
    payload = await request.json()
    try:
        event = parse_event(x_github_event, payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    if event is None:
        logger.debug(f"Ignoring {x_github_event} event")
        return {"status": "ignored"}

    repository = event.repo_name()
    logger.info(
        f"Received {x_github_event}.{event.action} on #{event.issue.number}",
        extra={"repo": repository, "event": x_github_event},
    )
    try:
        await handle_github(ctx, event)
    except HandlerMessageError as e:
        await ctx.github.post_comment(
            repository, event.issue.number,
            error_comment(event.user().login, e.message, ctx.github_username),
        )
        return {"status": "error_reported"}
    return {"status": "ok"}
