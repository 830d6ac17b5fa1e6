"""Zulip Webhook - POST /zulip-hook, called by Zulip's outgoing webhook integration.

Invariants:
    - The response body is the bot's reply: {"content": ...} or {"response_not_required": true}
    - User-facing failures are replied verbatim; internal failures get a fixed notice
    - Always 200 for a well-formed request: Zulip shows non-200 responses as bot errors
"""

import logging

from fastapi import APIRouter, Depends

from triagebot.api.dependencies import get_context
from triagebot.core.errors import HandlerInternalError, HandlerMessageError
from triagebot.core.format_messages import INTERNAL_FAILURE_REPLY
from triagebot.infrastructure.zulip_client import Recipient
from triagebot.schemas.zulip_request import ZulipRequest
from triagebot.services.context import HandlerContext
from triagebot.services.handler_dispatch import handle_zulip

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])


@router.post("/zulip-hook")
async def zulip_hook(body: ZulipRequest, ctx: HandlerContext = Depends(get_context)):
    try:
        reply = await handle_zulip(ctx, body)
    except HandlerMessageError as e:
        return {"content": e.message}
    except HandlerInternalError as e:
        logger.error(
            f"Handling Zulip message in {Recipient.of(body.message).narrow()} failed",
            extra={"error_code": e.code, "event": "zulip"},
        )
        return {"content": INTERNAL_FAILURE_REPLY}
    if reply is None:
        return {"response_not_required": True}
    return {"content": reply}
