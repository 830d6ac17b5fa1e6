"""Route Dependencies - hand the lifespan-built collaborators to route handlers."""

from fastapi import Request

from triagebot.services.context import HandlerContext


def get_context(request: Request) -> HandlerContext:
    """FastAPI dependency for the HandlerContext built in main.lifespan."""
    return request.app.state.context
