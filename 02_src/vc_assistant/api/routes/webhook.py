"""Inbound Telegram webhook route."""

import hmac

from fastapi import APIRouter, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ...app import Application
from ...logging_config import get_logger
from ...models import InboundMessage

logger = get_logger(__name__)


class TelegramUser(BaseModel):
    id: int
    first_name: str | None = None
    username: str | None = None


class TelegramChat(BaseModel):
    id: int
    type: str | None = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    sender: TelegramUser | None = Field(None, alias="from")
    chat: TelegramChat
    text: str | None = None


class TelegramUpdate(BaseModel):
    """The subset of a Telegram update the bot reads."""

    update_id: int
    message: TelegramMessage | None = None


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


def to_inbound_message(update: TelegramUpdate) -> InboundMessage | None:
    """Envelope for a text message, or None for updates the bot ignores."""
    message = update.message
    if message is None or message.sender is None or not message.text:
        return None

    text = message.text.strip()
    if not text:
        return None

    return InboundMessage(
        user_id=str(message.sender.id),
        chat_id=str(message.chat.id),
        text=text,
        username=message.sender.username,
        first_name=message.sender.first_name,
    )


def create_webhook_router(app: Application) -> APIRouter:
    """Create webhook router."""
    router = APIRouter(prefix="/api/telegram", tags=["webhook"])

    @router.post("/webhook", response_model=StatusResponse)
    async def receive_update(
        update: TelegramUpdate,
        x_telegram_bot_api_secret_token: str | None = Header(None),
    ):
        """Handle one Telegram update."""
        secret = app.settings.webhook_secret
        if secret and not hmac.compare_digest(
            x_telegram_bot_api_secret_token or "", secret
        ):
            logger.warning("Rejected webhook call with a bad secret token")
            raise HTTPException(status_code=403, detail="Invalid secret token")

        message = to_inbound_message(update)
        if message is None:
            return {"status": "ok"}

        if not await app.orchestrator.handle_message(message):
            return JSONResponse(status_code=500, content={"status": "error"})
        return {"status": "ok"}

    return router
