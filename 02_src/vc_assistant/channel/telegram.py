"""Telegram Bot API message channel."""

from typing import Protocol

import httpx

from ..errors import ChannelError
from ..logging_config import get_logger

logger = get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

BOT_COMMANDS = [
    {"command": "start", "description": "Start the bot and authenticate"},
    {"command": "search", "description": "Search for people in database"},
    {"command": "add", "description": "Add a new person to database"},
    {"command": "help", "description": "Show help information"},
    {"command": "cancel", "description": "Cancel current operation"},
]


class IMessageChannel(Protocol):
    """Outbound delivery to chat users and inbound delivery setup."""

    async def send_message(self, chat_id: str, text: str) -> None:
        """Send an HTML-formatted text message to a chat."""
        ...

    async def set_commands(self) -> None:
        """Register the bot command menu."""
        ...

    async def set_webhook(self, webhook_url: str) -> None:
        """Point inbound updates at webhook_url."""
        ...


class TelegramChannel:
    """Message channel backed by the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        webhook_secret: str = "",
        timeout: float = 10.0,
        base_url: str = TELEGRAM_API_URL,
    ):
        self._bot_token = bot_token
        self._webhook_secret = webhook_secret
        self._timeout = timeout
        self._base_url = base_url
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Open the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        if not self._bot_token:
            logger.warning("TELEGRAM_BOT_TOKEN not set, outbound messages are disabled")

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _call(self, method: str, payload: dict) -> dict:
        if not self._bot_token:
            raise ChannelError("TELEGRAM_BOT_TOKEN not set")
        if not self._client:
            raise ChannelError("Channel not started")

        url = f"{self._base_url}/bot{self._bot_token}/{method}"
        try:
            response = await self._client.post(url, json=payload)
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ChannelError(f"{method} failed: {e}") from e

        if not result.get("ok"):
            raise ChannelError(
                f"Telegram API error: {result.get('description', response.status_code)}"
            )
        return result

    async def send_message(self, chat_id: str, text: str) -> None:
        """Send an HTML-formatted text message to a chat."""
        await self._call(
            "sendMessage",
            {"chat_id": chat_id, "text": text, "parse_mode": "HTML"},
        )

    async def set_commands(self) -> None:
        """Register the bot command menu."""
        await self._call("setMyCommands", {"commands": BOT_COMMANDS})

    async def set_webhook(self, webhook_url: str) -> None:
        """Point inbound updates at webhook_url."""
        payload = {
            "url": webhook_url,
            "max_connections": 40,
            "allowed_updates": ["message"],
        }
        if self._webhook_secret:
            payload["secret_token"] = self._webhook_secret
        await self._call("setWebhook", payload)
        logger.info("Webhook registered at %s", webhook_url)
