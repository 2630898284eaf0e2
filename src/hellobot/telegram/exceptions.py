"""Errors raised while talking to the Telegram Bot API."""

from __future__ import annotations

from typing import Any

import httpx


class TelegramError(Exception):
    """Base class for Telegram integration failures."""


class TelegramNotConfiguredError(TelegramError):
    """Raised when a Bot API call is attempted without BOT_API_TOKEN."""


class TelegramApiError(TelegramError):
    """Telegram answered, but not with a successful ``{"ok": true}`` payload."""

    def __init__(self, method: str, status_code: int, payload: Any) -> None:
        self.method = method
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Telegram {method} failed: status={status_code} desc={self.description}")

    @property
    def description(self) -> str | None:
        if isinstance(self.payload, dict):
            description = self.payload.get("description")
            return str(description) if description is not None else None
        if isinstance(self.payload, str) and self.payload:
            return self.payload
        return None


# Everything a single Bot API call can raise once the client is configured.
TELEGRAM_CALL_EXCEPTIONS: tuple[type[Exception], ...] = (
    TelegramError,
    httpx.HTTPError,
)
