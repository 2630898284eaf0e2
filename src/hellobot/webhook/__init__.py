"""Webhook registration with the Telegram Bot API."""

from hellobot.webhook.registrar import (
    WebhookConfigurationError,
    WebhookInitializer,
    WebhookRegistrar,
)

__all__ = [
    "WebhookConfigurationError",
    "WebhookInitializer",
    "WebhookRegistrar",
]
