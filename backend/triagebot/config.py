"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) - single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://triagebot:triagebot@db:5432/triagebot"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # GitHub
    github_token: str = "ghp-placeholder"
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    github_bot_username: str = "rustbot"
    config_file_name: str = "triagebot.toml"
    config_cache_ttl_seconds: int = 120
    merge_bot_username: str = "bors"

    # Zulip
    zulip_api_url: str = "https://rust-lang.zulipchat.com/api/v1"
    zulip_bot_email: str = "triage-rust-lang-bot@zulipchat.com"
    zulip_api_token: str = "zulip-placeholder"
    zulip_bot_username: str = "triagebot"

    # Team API (zulip id map, team membership)
    team_api_url: str = "https://team-api.infra.rust-lang.org/v1"

    # Outbound HTTP
    http_max_retries: int = 3
    http_base_delay_ms: int = 500
    http_max_delay_ms: int = 10_000
    http_timeout_seconds: int = 30

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
