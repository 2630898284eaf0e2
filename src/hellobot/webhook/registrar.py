"""Telegram webhook registration: explicit trigger and one-time cold-start init."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from hellobot.core.background import BackgroundTaskTracker
from hellobot.core.config import Settings
from hellobot.core.observability import log_event
from hellobot.telegram import TELEGRAM_CALL_EXCEPTIONS, TelegramClient

logger = logging.getLogger(__name__)


class WebhookConfigurationError(RuntimeError):
    """Raised when the webhook cannot be registered because BASE_URL is unset."""


class WebhookRegistrar:
    """Registers this service's ``/webhook`` URL with Telegram."""

    def __init__(
        self,
        client: TelegramClient,
        *,
        webhook_url: str | None,
        secret_token: str | None,
    ) -> None:
        self._client = client
        self.webhook_url = webhook_url
        self._secret_token = secret_token

    @classmethod
    def from_settings(cls, settings: Settings, client: TelegramClient) -> WebhookRegistrar:
        secret = settings.webhook_secret_token
        return cls(
            client,
            webhook_url=settings.webhook_url,
            secret_token=secret.get_secret_value() if secret else None,
        )

    async def register(self) -> dict[str, Any]:
        """Call ``setWebhook`` once and return Telegram's payload.

        Raises :class:`WebhookConfigurationError` without BASE_URL and lets
        Telegram and transport errors propagate.
        """
        if self.webhook_url is None:
            raise WebhookConfigurationError("BASE_URL not configured")
        data = await self._client.set_webhook(self.webhook_url, secret_token=self._secret_token)
        log_event(logger, event="telegram.webhook.registered", url=self.webhook_url)
        return data

    async def reset(self) -> bool:
        """Delete any existing webhook, then register the current one.

        Failures are logged, never raised. Returns True when the webhook ended
        up registered.
        """
        try:
            await self._client.delete_webhook(drop_pending_updates=True)
        except TELEGRAM_CALL_EXCEPTIONS as exc:
            log_event(
                logger,
                level=logging.WARNING,
                event="telegram.webhook.delete_failed",
                error=str(exc),
            )

        if self.webhook_url is None:
            logger.warning("Webhook registration skipped: BASE_URL not configured")
            return False

        try:
            await self.register()
        except TELEGRAM_CALL_EXCEPTIONS as exc:
            log_event(
                logger,
                level=logging.ERROR,
                event="telegram.webhook.register_failed",
                url=self.webhook_url,
                error=str(exc),
            )
            return False
        return True


class WebhookInitializer:
    """Single-flight guard around :meth:`WebhookRegistrar.reset`.

    The latch is checked and set synchronously in :meth:`ensure_started`, so
    concurrent first requests schedule at most one run. A run that crashes
    releases the latch and a later request may try again.
    """

    def __init__(self, registrar: WebhookRegistrar, tracker: BackgroundTaskTracker) -> None:
        self._registrar = registrar
        self._tracker = tracker
        self._task: asyncio.Task[None] | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    def ensure_started(self) -> asyncio.Task[None] | None:
        """Schedule the one-time run; returns the new task, or None if already scheduled."""
        if self._task is not None:
            return None
        self._task = self._tracker.spawn(self._run(), name="hellobot-webhook-init")
        return self._task

    async def _run(self) -> None:
        try:
            configured = await self._registrar.reset()
        except Exception:
            logger.exception("Webhook init failed")
            self._task = None
            return
        log_event(logger, event="telegram.webhook.init_finished", configured=configured)
