"""Root conftest - shared test configuration."""

import os

# Ensure tests don't accidentally use real credentials or databases
os.environ.setdefault("GITHUB_TOKEN", "ghp-test-fake-token")
os.environ.setdefault("ZULIP_API_TOKEN", "zulip-test-fake-token")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")
