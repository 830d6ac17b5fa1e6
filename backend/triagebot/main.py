"""triagebot - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TriageError -> structured JSON responses
    - Database, HTTP clients and the HandlerContext are built in the lifespan and
      closed when it exits

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Three error handler layers: TriageError (domain), RequestValidationError
      (Pydantic), Exception (catch-all) - never leaks internal details
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from triagebot.core.errors import TriageError, ErrorSeverity
from triagebot.infrastructure.database import init_db
from triagebot.infrastructure.github_client import GithubClient
from triagebot.infrastructure.observability import setup_logging
from triagebot.infrastructure.team_api import TeamApiClient
from triagebot.infrastructure.zulip_client import ZulipClient
from triagebot.config import Settings, get_settings
from triagebot.services.context import HandlerContext
from triagebot.services.merge_commit_store import SqlMergeCommitStore
from triagebot.services.notification_store import SqlNotificationStore
from triagebot.services.repo_config_loader import RepoConfigLoader
from triagebot.api.routes import github_webhook, health, notifications, zulip_webhook

logger = logging.getLogger(__name__)


def build_context(
    settings: Settings, session_factory,
    github: GithubClient, zulip: ZulipClient, team: TeamApiClient,
) -> HandlerContext:
    return HandlerContext(
        github=github,
        zulip=zulip,
        identities=team,
        notifications=SqlNotificationStore(session_factory),
        merge_commits=SqlMergeCommitStore(session_factory),
        configs=RepoConfigLoader(
            github, settings.config_file_name, settings.config_cache_ttl_seconds,
        ),
        github_username=settings.github_bot_username,
        zulip_username=settings.zulip_bot_username,
        merge_bot_username=settings.merge_bot_username,
        config_file_name=settings.config_file_name,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    github = GithubClient.from_settings(settings)
    zulip = ZulipClient.from_settings(settings)
    team = TeamApiClient.from_settings(settings)
    app.state.context = build_context(settings, manager.session, github, zulip, team)
    logger.info("triagebot started")
    yield
    logger.info("triagebot shutting down")
    await github.aclose()
    await zulip.aclose()
    await team.aclose()
    await manager.dispose()


app = FastAPI(title="triagebot", version="0.1.0", lifespan=lifespan)

# Routes - explicit registration
app.include_router(health.router)
app.include_router(github_webhook.router)
app.include_router(zulip_webhook.router)
app.include_router(notifications.router)


# ─── GLOBAL ERROR HANDLERS ──────────────────────────────────────

@app.exception_handler(TriageError)
async def triage_error_handler(request: Request, exc: TriageError):
    """Handle all triagebot domain/infrastructure errors."""
    logger.error(
        f"TriageError: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError,
):
    """Handle Pydantic validation errors with structured response."""
    logger.warning(
        f"Validation error on {request.url.path}: {exc.errors()}",
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                        "type": e["type"],
                    }
                    for e in exc.errors()
                ],
            },
        },
    )


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    """Catch-all - never leaks internal details."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )
