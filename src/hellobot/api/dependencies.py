"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from hellobot.core.background import BackgroundTaskTracker
from hellobot.core.config import Settings, get_settings
from hellobot.telegram import TelegramClient
from hellobot.webhook import WebhookRegistrar


def get_app_settings(request: Request) -> Settings:
    """Return settings bound at startup, falling back to the cached env settings."""
    settings: Settings | None = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = get_settings()
    return settings


def get_telegram_client(request: Request) -> TelegramClient:
    """Return the Bot API client from app state."""
    client: TelegramClient | None = getattr(request.app.state, "telegram", None)
    if client is None:
        raise RuntimeError("Telegram client is not initialized")
    return client


def get_background_tasks(request: Request) -> BackgroundTaskTracker:
    """Return the tracker for detached work drained at shutdown."""
    tracker: BackgroundTaskTracker | None = getattr(request.app.state, "background_tasks", None)
    if tracker is None:
        raise RuntimeError("Background task tracker is not initialized")
    return tracker


def get_webhook_registrar(request: Request) -> WebhookRegistrar:
    """Return the webhook registrar from app state."""
    registrar: WebhookRegistrar | None = getattr(request.app.state, "webhook_registrar", None)
    if registrar is None:
        raise RuntimeError("Webhook registrar is not initialized")
    return registrar


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Telegram = Annotated[TelegramClient, Depends(get_telegram_client)]
BackgroundTracker = Annotated[BackgroundTaskTracker, Depends(get_background_tasks)]
Registrar = Annotated[WebhookRegistrar, Depends(get_webhook_registrar)]
