"""API schema models."""

from .telegram import TelegramChat, TelegramMessage, TelegramUpdate, TelegramUser
from .webhook import SetWebhookFailure, SetWebhookResponse

__all__ = [
    "SetWebhookFailure",
    "SetWebhookResponse",
    "TelegramChat",
    "TelegramMessage",
    "TelegramUpdate",
    "TelegramUser",
]
