"""Control API routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from ...app import Application
from ...errors import ChannelError


class WebhookSetupRequest(BaseModel):
    """Request model for webhook registration."""

    webhook_url: str


class WebhookSetupResponse(BaseModel):
    """Response model for webhook registration."""

    success: bool
    message: str | None = None
    error: str | None = None


def create_control_router(app: Application) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    @router.post("/webhook", response_model=WebhookSetupResponse)
    async def setup_webhook(request: WebhookSetupRequest) -> dict:
        """Register the inbound webhook with the message channel."""
        try:
            await app.channel.set_webhook(request.webhook_url)
        except ChannelError as e:
            return {"success": False, "error": f"Failed to setup webhook: {e}"}
        return {"success": True, "message": "Webhook setup successfully"}

    return router
