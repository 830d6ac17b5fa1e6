"""Notifications - read-only listing of one user's notification list."""

from fastapi import APIRouter, Depends

from triagebot.api.dependencies import get_context
from triagebot.core.domain_types import GithubUserId
from triagebot.core.format_messages import notification_listing
from triagebot.services.context import HandlerContext

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("/{user_id}")
async def list_notifications(user_id: int, ctx: HandlerContext = Depends(get_context)):
    """Entries ordered by position, 1..N."""
    entries = await ctx.notifications.snapshot(GithubUserId(user_id))
    return {"user_id": user_id, "notifications": notification_listing(entries)}
