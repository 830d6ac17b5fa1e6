"""Resilient HTTP Client - wraps httpx.AsyncClient with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection, timeout): max_retries retries with exponential backoff
    - Client errors (4xx except 429): returned to the caller unchanged, no retry
      (callers decide whether 404 means "absent" or a failure)
    - Transport failures after retries mapped to ExternalAPIError (core/errors.py)

Design Decisions:
    - One wrapper shared by the GitHub, Zulip and team API clients: retry policy lives
      here, not in the handlers
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
"""

import asyncio
import logging
import random

import httpx

from triagebot.core.errors import ExternalAPIError

logger = logging.getLogger(__name__)

_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class ResilientHttpClient:
    """httpx.AsyncClient with retry/backoff for one external service."""

    def __init__(
        self,
        service: str,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 10_000,
        timeout_seconds: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service = service
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            auth=auth,
            timeout=timeout_seconds,
            transport=transport,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request, retrying transient failures. Returns the final response."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(method, url, **kwargs)
            except (httpx.TransportError, httpx.TimeoutException) as e:
                await self._handle_transient_error(e, attempt)
                continue

            if response.status_code not in _RETRY_STATUSES:
                return response
            if attempt >= self.max_retries:
                raise ExternalAPIError(
                    self.service,
                    f"{method} {url} failed with {response.status_code} after retries",
                    status_code=response.status_code,
                )
            delay = self._retry_after(response) or self._backoff(attempt)
            logger.warning(
                f"{self.service} returned {response.status_code}, retry after {delay}ms",
                extra={"attempt": attempt + 1, "status_code": response.status_code},
            )
            await asyncio.sleep(delay / 1000)
        raise ExternalAPIError(self.service, f"{method} {url} failed")

    async def request_ok(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Like request(), but any non-2xx final response is an ExternalAPIError."""
        return self.ensure_ok(await self.request(method, url, **kwargs))

    def ensure_ok(self, response: httpx.Response) -> httpx.Response:
        if response.is_error:
            request = response.request
            raise ExternalAPIError(
                self.service,
                f"{request.method} {request.url} returned {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _handle_transient_error(self, e: Exception, attempt: int) -> None:
        if attempt >= self.max_retries:
            raise ExternalAPIError(
                self.service,
                f"Transient failure after {self.max_retries} retries: {e}",
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"{self.service} transient error, retry after {delay}ms: {e}",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    @staticmethod
    def _retry_after(response: httpx.Response) -> int | None:
        """Retry-After header in milliseconds, when it is a number of seconds."""
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None
