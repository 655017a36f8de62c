import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class OutboundEmail(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: str = Field(alias="from")
    to: List[str]
    reply_to: str
    subject: str
    html: str
    text: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class SendResult:
    ok: bool
    status: int
    body: str = ""


class MailSender(Protocol):
    async def send(self, message: OutboundEmail) -> SendResult:
        ...


class ResendMailSender:
    """Sends one message through the provider's HTTP API. No retries."""

    def __init__(self, api_key: str, api_url: str):
        self.api_key = api_key
        self.api_url = api_url

    async def send(self, message: OutboundEmail) -> SendResult:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        async with aiohttp.ClientSession() as session:
            async with session.post(
                self.api_url, json=message.to_payload(), headers=headers
            ) as response:
                body = await response.text()
                logger.debug("Provider responded %s: %s", response.status, body)
                return SendResult(
                    ok=200 <= response.status < 300,
                    status=response.status,
                    body=body,
                )
