"""Repository Config Loader - fetches, parses, classifies and caches triagebot.toml.

Invariants:
    - Absent file (404) -> ConfigurationError(MISSING)
    - TOML syntax or schema errors -> ConfigurationError(MALFORMED) with the parser's detail
    - Transport / 5xx failures -> ConfigurationError(TRANSIENT), never cached
    - Successful, MISSING and MALFORMED results are cached per repository for ttl_seconds

Design Decisions:
    - Cache negative results too: an unconfigured repository is pinged far more often
      than it gains a config file
    - time.monotonic for expiry: wall-clock jumps never extend or shorten the TTL
"""

import logging
import time
from typing import Protocol

from triagebot.core.errors import ConfigErrorKind, ConfigurationError, ExternalAPIError
from triagebot.core.format_messages import CONFIG_MALFORMED_MESSAGE, CONFIG_MISSING_MESSAGE
from triagebot.schemas.repo_config import RepoConfig, parse_repo_config

logger = logging.getLogger(__name__)


class RawFileSource(Protocol):
    async def get_raw_file(self, repository: str, path: str) -> str | None: ...


class RepoConfigLoader:
    """ConfigProvider reading `file_name` from each repository's default branch."""

    def __init__(
        self, source: RawFileSource, file_name: str = "triagebot.toml",
        ttl_seconds: int = 120,
    ):
        self.source = source
        self.file_name = file_name
        self.ttl_seconds = ttl_seconds
        self._cache: dict[str, tuple[float, RepoConfig | ConfigurationError]] = {}

    async def get(self, repository: str) -> RepoConfig:
        cached = self._cache.get(repository)
        if cached is not None and time.monotonic() - cached[0] < self.ttl_seconds:
            return self._unwrap(cached[1])

        try:
            result = await self._load(repository)
        except ExternalAPIError as e:
            logger.warning(
                f"Fetching {self.file_name} failed: {e.message}",
                extra={"repo": repository, "error_code": e.code},
            )
            raise ConfigurationError(
                ConfigErrorKind.TRANSIENT, f"Could not fetch `{self.file_name}`: {e.message}",
            ) from e
        self._cache[repository] = (time.monotonic(), result)
        return self._unwrap(result)

    def invalidate(self, repository: str) -> None:
        self._cache.pop(repository, None)

    async def _load(self, repository: str) -> RepoConfig | ConfigurationError:
        text = await self.source.get_raw_file(repository, self.file_name)
        if text is None:
            return ConfigurationError(
                ConfigErrorKind.MISSING,
                CONFIG_MISSING_MESSAGE.format(file_name=self.file_name),
            )
        try:
            return parse_repo_config(text)
        except ValueError as e:
            logger.info(f"Malformed {self.file_name}: {e}", extra={"repo": repository})
            return ConfigurationError(
                ConfigErrorKind.MALFORMED,
                CONFIG_MALFORMED_MESSAGE.format(file_name=self.file_name, detail=e),
            )

    @staticmethod
    def _unwrap(result: RepoConfig | ConfigurationError) -> RepoConfig:
        if isinstance(result, ConfigurationError):
            raise ConfigurationError(result.kind, result.message)
        return result
