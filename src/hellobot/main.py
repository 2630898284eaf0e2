import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from hellobot import __version__
from hellobot.api.middleware import RequestCorrelationMiddleware, WebhookInitMiddleware
from hellobot.api.router import api_router
from hellobot.core.background import BackgroundTaskTracker
from hellobot.core.config import Settings, get_settings
from hellobot.core.logging import configure_logging
from hellobot.telegram import TelegramClient
from hellobot.webhook import WebhookInitializer, WebhookRegistrar

logger = logging.getLogger(__name__)


def _warn_about_optional_config(settings: Settings) -> None:
    """Log configuration gaps that disable optional behaviour without failing startup."""
    if settings.bot_api_token is None:
        logger.warning("BOT_API_TOKEN is not configured; replies will not be sent")
    if settings.webhook_secret_token is None:
        logger.warning(
            "WEBHOOK_SECRET_TOKEN is not configured; /webhook accepts unauthenticated requests"
        )
    if settings.auto_webhook_init and settings.base_url is None:
        logger.warning("AUTO_WEBHOOK_INIT is enabled but BASE_URL is not configured")


def create_app(
    *,
    settings: Settings | None = None,
    telegram_client: TelegramClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Bind process-scoped state and drain background work on shutdown."""
        _warn_about_optional_config(settings)
        tracker = BackgroundTaskTracker()
        client = telegram_client or TelegramClient.from_settings(settings)
        registrar = WebhookRegistrar.from_settings(settings, client)

        app.state.settings = settings
        app.state.telegram = client
        app.state.background_tasks = tracker
        app.state.webhook_registrar = registrar
        app.state.webhook_initializer = (
            WebhookInitializer(registrar, tracker) if settings.auto_webhook_init else None
        )
        yield
        await tracker.drain(settings.background_drain_timeout_seconds)
        app.state.webhook_initializer = None

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_local_environment else None,
        redoc_url="/redoc" if settings.is_local_environment else None,
        openapi_url="/openapi.json" if settings.is_local_environment else None,
    )
    if settings.auto_webhook_init:
        app.add_middleware(WebhookInitMiddleware)
    app.add_middleware(RequestCorrelationMiddleware)
    app.include_router(api_router)
    return app


def run() -> None:
    """Serve the relay with uvicorn on HOST:PORT."""
    settings = get_settings()
    uvicorn.run(
        "hellobot.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


app = create_app()
