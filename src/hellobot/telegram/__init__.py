"""Telegram Bot API integration."""

from hellobot.telegram.client import ALLOWED_UPDATES, SECRET_TOKEN_HEADER, TelegramClient
from hellobot.telegram.exceptions import (
    TELEGRAM_CALL_EXCEPTIONS,
    TelegramApiError,
    TelegramError,
    TelegramNotConfiguredError,
)
from hellobot.telegram.greeting import DEFAULT_GREETING, build_greeting

__all__ = [
    "ALLOWED_UPDATES",
    "DEFAULT_GREETING",
    "SECRET_TOKEN_HEADER",
    "TELEGRAM_CALL_EXCEPTIONS",
    "TelegramApiError",
    "TelegramClient",
    "TelegramError",
    "TelegramNotConfiguredError",
    "build_greeting",
]
