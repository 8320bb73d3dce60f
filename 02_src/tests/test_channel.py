"""Tests for TelegramChannel."""

import json

import httpx
import pytest

from vc_assistant.channel import BOT_COMMANDS, TelegramChannel
from vc_assistant.errors import ChannelError


class RecordingTransport:
    """Collects requests and answers with a fixed Telegram response."""

    def __init__(self, response: dict | None = None, status_code: int = 200):
        self.requests: list[httpx.Request] = []
        self._response = response if response is not None else {"ok": True, "result": True}
        self._status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self._status_code, json=self._response)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def make_channel(transport: RecordingTransport, token: str = "TOKEN", secret: str = "") -> TelegramChannel:
    channel = TelegramChannel(bot_token=token, webhook_secret=secret)
    channel._client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    return channel


class TestTelegramChannel:
    """Tests for Bot API calls."""

    @pytest.mark.asyncio
    async def test_send_message_uses_html(self):
        """Test sendMessage payload and URL."""
        transport = RecordingTransport()
        channel = make_channel(transport)

        await channel.send_message("100", "<b>hi</b>")

        request = transport.requests[0]
        assert str(request.url) == "https://api.telegram.org/botTOKEN/sendMessage"
        assert transport.payload() == {"chat_id": "100", "text": "<b>hi</b>", "parse_mode": "HTML"}
        await channel.stop()

    @pytest.mark.asyncio
    async def test_set_commands(self):
        """Test the command menu is registered."""
        transport = RecordingTransport()
        channel = make_channel(transport)

        await channel.set_commands()

        assert transport.requests[0].url.path.endswith("/setMyCommands")
        assert transport.payload() == {"commands": BOT_COMMANDS}
        await channel.stop()

    @pytest.mark.asyncio
    async def test_set_webhook_includes_secret(self):
        """Test setWebhook sends the URL and secret token."""
        transport = RecordingTransport()
        channel = make_channel(transport, secret="s3cret")

        await channel.set_webhook("https://example.com/api/telegram/webhook")

        payload = transport.payload()
        assert payload["url"] == "https://example.com/api/telegram/webhook"
        assert payload["secret_token"] == "s3cret"
        assert payload["allowed_updates"] == ["message"]
        await channel.stop()

    @pytest.mark.asyncio
    async def test_api_error_raises(self):
        """Test ok=false is reported as ChannelError."""
        transport = RecordingTransport(
            {"ok": False, "description": "Forbidden: bot was blocked by the user"}, 403
        )
        channel = make_channel(transport)

        with pytest.raises(ChannelError, match="blocked"):
            await channel.send_message("100", "hi")
        await channel.stop()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        """Test network failures are reported as ChannelError."""

        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        channel = TelegramChannel(bot_token="TOKEN")
        channel._client = httpx.AsyncClient(transport=httpx.MockTransport(fail))

        with pytest.raises(ChannelError, match="sendMessage failed"):
            await channel.send_message("100", "hi")
        await channel.stop()

    @pytest.mark.asyncio
    async def test_missing_token_raises(self):
        """Test calls without a bot token fail fast."""
        channel = TelegramChannel(bot_token="")
        await channel.start()

        with pytest.raises(ChannelError, match="TELEGRAM_BOT_TOKEN"):
            await channel.send_message("100", "hi")
        await channel.stop()

    @pytest.mark.asyncio
    async def test_not_started_raises(self):
        """Test calls before start() fail."""
        channel = TelegramChannel(bot_token="TOKEN")

        with pytest.raises(ChannelError, match="not started"):
            await channel.send_message("100", "hi")
