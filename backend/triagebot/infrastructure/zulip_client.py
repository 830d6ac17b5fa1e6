"""Zulip Client - sends messages as the bot and looks up members.

Invariants:
    - Authenticated with the bot's email + API key (HTTP basic auth)
    - Zulip answers errors with HTTP 200 + {"result": "error"} as well as with 4xx;
      both become ExternalAPIError
    - Recipient.narrow() produces the same #narrow fragment the Zulip web client links to
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from triagebot.config import Settings
from triagebot.core.domain_types import ZulipUserId
from triagebot.core.errors import ExternalAPIError
from triagebot.infrastructure.http_client import ResilientHttpClient
from triagebot.schemas.zulip_request import ZulipMessage

logger = logging.getLogger(__name__)


def _encode_narrow(value: str) -> str:
    """Zulip's URL hash encoding: percent-encode everything but [A-Za-z0-9_~-], then % -> '.'."""
    return quote(value, safe="~").replace(".", "%2E").replace("%", ".")


@dataclass(frozen=True)
class Recipient:
    """Where a message goes: a stream topic, or one user privately."""
    id: int
    topic: str | None = None
    email: str | None = None

    @classmethod
    def of(cls, message: ZulipMessage) -> "Recipient":
        """The conversation a message was sent in (replies go back there)."""
        if message.is_private:
            return cls(message.recipient_id, email=message.sender_email)
        return cls(message.recipient_id, topic=message.topic or "")

    @property
    def is_private(self) -> bool:
        return self.email is not None

    def narrow(self) -> str:
        if self.is_private:
            return f"pm-with/{self.id}-xxx"
        return f"stream/{self.id}-xxx/topic/{_encode_narrow(self.topic or '')}"

    def url(self, site_url: str) -> str:
        return f"{site_url.rstrip('/')}/#narrow/{self.narrow()}"


class ZulipClient:
    def __init__(
        self,
        api_url: str,
        bot_email: str,
        api_token: str,
        transport: httpx.AsyncBaseTransport | None = None,
        **retry_options,
    ):
        self.http = ResilientHttpClient(
            "Zulip", api_url, auth=(bot_email, api_token),
            transport=transport, **retry_options,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ZulipClient":
        return cls(
            settings.zulip_api_url,
            settings.zulip_bot_email,
            settings.zulip_api_token,
            max_retries=settings.http_max_retries,
            base_delay_ms=settings.http_base_delay_ms,
            max_delay_ms=settings.http_max_delay_ms,
            timeout_seconds=settings.http_timeout_seconds,
        )

    async def send(self, recipient: Recipient, content: str) -> None:
        if recipient.is_private:
            data = {"type": "private", "to": recipient.email, "content": content}
        else:
            data = {
                "type": "stream",
                "to": str(recipient.id),
                "topic": recipient.topic or "",
                "content": content,
            }
        await self._call("POST", "/messages", data=data)
        logger.info(f"Sent Zulip message to {recipient.narrow()}")

    async def send_private(self, user_id: ZulipUserId, email: str, content: str) -> None:
        await self.send(Recipient(user_id, email=email), content)

    async def get_member_email(self, user_id: ZulipUserId) -> str | None:
        """Email address of a member, None when no member has the id."""
        body = await self._call("GET", "/users")
        for member in body["members"]:
            if member["user_id"] == user_id:
                return member["email"]
        return None

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _call(self, method: str, url: str, **kwargs) -> dict:
        response = await self.http.request_ok(method, url, **kwargs)
        return self._checked(response)

    @staticmethod
    def _checked(response: httpx.Response) -> dict:
        body = response.json()
        if body.get("result") != "success":
            raise ExternalAPIError("Zulip", body.get("msg", "unknown error"))
        return body
