"""Discord webhook notifications."""

import logging
from typing import Optional

import httpx

from ..constants import HTTP_TIMEOUT_SECONDS
from ..pipeline.base import INotifier
from .http import request_json

logger = logging.getLogger(__name__)

DISCORD_MESSAGE_LIMIT = 2000


class DiscordNotifier(INotifier):
    """Post plain messages to a Discord channel through a webhook."""

    def __init__(
        self,
        webhook_url: str,
        username: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.webhook_url = webhook_url
        self.username = username
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> "DiscordNotifier":
        settings.require("discord_webhook_url")
        return cls(
            webhook_url=settings.discord_webhook_url,
            username=settings.notifier.username,
            timeout=settings.notifier.timeout_seconds,
        )

    async def send(self, message: str) -> None:
        """Post a message, truncated to Discord's length limit.

        Raises:
            ProviderError: If the webhook rejects the message.
        """
        payload = {"content": message[:DISCORD_MESSAGE_LIMIT]}
        if self.username:
            payload["username"] = self.username

        await request_json(
            "POST",
            self.webhook_url,
            provider="discord",
            operation="send",
            json=payload,
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.debug("Discord message sent: %s", payload["content"])
