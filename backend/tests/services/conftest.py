"""Service test fixtures - async DB, stores, a faked HandlerContext and the FastAPI client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Stores run on a DatabaseSessionManager wired to the test engine (same error mapping as prod)
    - External collaborators (GitHub, Zulip, team API, config) are AsyncMocks on the context

Design Decisions:
    - SQLite in-memory with StaticPool: one connection shared by every session, so
      committed rows are visible across sessions (FOR UPDATE is a no-op on SQLite)
    - The app lifespan is not run: tests put their own context on app.state
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from triagebot.db.base import Base
from triagebot.infrastructure.database import DatabaseSessionManager
import triagebot.infrastructure.database as db_module
import triagebot.models  # noqa: F401
from triagebot.main import app
from triagebot.schemas.github_event import parse_event
from triagebot.schemas.repo_config import RelabelConfig, RepoConfig
from triagebot.schemas.zulip_request import ZulipRequest
from triagebot.services.context import HandlerContext
from triagebot.services.merge_commit_store import SqlMergeCommitStore
from triagebot.services.notification_store import SqlNotificationStore


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def db_manager(test_engine, test_session_factory):
    """DatabaseSessionManager wired to the test engine (skips pool configuration)."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
async def store(db_manager):
    return SqlNotificationStore(db_manager.session)


@pytest.fixture
async def merge_store(db_manager):
    return SqlMergeCommitStore(db_manager.session)


@pytest.fixture
def repo_config():
    return RepoConfig(relabel=RelabelConfig(allow_unauthenticated=["T-*", "!T-secret"]))


@pytest.fixture
async def ctx(store, merge_store, repo_config):
    """HandlerContext with real stores and mocked HTTP collaborators."""
    github = AsyncMock()
    github.get_user_id.return_value = None
    zulip = AsyncMock()
    identities = AsyncMock()
    identities.to_github_id.return_value = None
    identities.team_member_logins.return_value = None
    configs = AsyncMock()
    configs.get.return_value = repo_config
    return HandlerContext(
        github=github,
        zulip=zulip,
        identities=identities,
        notifications=store,
        merge_commits=merge_store,
        configs=configs,
    )


@pytest.fixture
async def client(ctx, db_manager):
    """FastAPI test client using the test context and database."""
    original_manager = db_module.db_manager
    db_module.db_manager = db_manager
    app.state.context = ctx

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    db_module.db_manager = original_manager


def zulip_request(
    data: str, sender_id: int = 100, private: bool = True, **message,
) -> ZulipRequest:
    """Build a ZulipRequest as Zulip's outgoing webhook would send it."""
    payload = {
        "sender_id": sender_id,
        "sender_email": f"user{sender_id}@zulip.example",
        "recipient_id": 1,
        "sender_short_name": f"user{sender_id}",
        "sender_full_name": f"User {sender_id}",
        "type": "private" if private else "stream",
        **message,
    }
    if not private:
        payload.setdefault("stream_id", 5)
        payload.setdefault("subject", "triage")
    return ZulipRequest.model_validate({"data": data, "message": payload, "token": "t"})


@pytest.fixture
def make_zulip_request():
    return zulip_request


def github_event(
    body: str = "", kind: str = "issue_comment", action: str | None = None,
    author: str = "alice", author_id: int | None = 1, labels: tuple[str, ...] = (),
):
    """Build an issue_comment or issues Event on rust-lang/rust#12."""
    issue = {
        "number": 12,
        "title": "ICE in borrowck",
        "body": body if kind == "issues" else "",
        "html_url": "https://github.com/rust-lang/rust/issues/12",
        "user": {"login": "reporter", "id": 99},
        "labels": [{"name": label} for label in labels],
    }
    payload = {"issue": issue, "repository": {"full_name": "rust-lang/rust"}}
    if kind == "issue_comment":
        payload["action"] = action or "created"
        payload["comment"] = {
            "body": body,
            "html_url": "https://github.com/rust-lang/rust/issues/12#issuecomment-1",
            "user": {"login": author, "id": author_id},
        }
    else:
        payload["action"] = action or "opened"
        issue["user"] = {"login": author, "id": author_id}
    return parse_event(kind, payload)


@pytest.fixture
def make_event():
    return github_event
