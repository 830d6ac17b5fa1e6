"""Zulip Outgoing Webhook Payloads - the message the bot was mentioned in.

Invariants:
    - `data` is the raw markdown body of the message
    - Private messages carry no stream/topic; stream messages carry both
    - The token field is parsed but not checked here (authentication is the deployment's concern)
"""

from pydantic import BaseModel, ConfigDict, Field

from triagebot.core.domain_types import ZulipMessageType


class ZulipMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    sender_id: int
    sender_email: str
    recipient_id: int
    sender_short_name: str = ""
    sender_full_name: str = ""
    stream_id: int | None = None
    topic: str | None = Field(None, alias="subject")
    type: ZulipMessageType

    @property
    def is_private(self) -> bool:
        return self.type is ZulipMessageType.PRIVATE


class ZulipRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: str
    message: ZulipMessage
    token: str | None = None
