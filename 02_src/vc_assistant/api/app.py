"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .routes import control, observability, webhook


def create_fastapi_app(application: Application) -> FastAPI:
    """Create a FastAPI app serving ``application``; each call is independent."""

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Manage application lifespan."""
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="VC Assistant API",
        description="Telegram webhook for the VC contacts and tasks assistant",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(webhook.create_webhook_router(application))
    fastapi_app.include_router(control.create_control_router(application))
    fastapi_app.include_router(observability.create_observability_router(application))

    return fastapi_app
