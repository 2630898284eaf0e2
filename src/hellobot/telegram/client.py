from __future__ import annotations

from typing import Any

import httpx

from hellobot.core.config import Settings
from hellobot.telegram.exceptions import TelegramApiError, TelegramNotConfiguredError

TELEGRAM_API_BASE = "https://api.telegram.org"
ALLOWED_UPDATES: tuple[str, ...] = ("message", "edited_message")
DEFAULT_MAX_CONNECTIONS = 40
SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class TelegramClient:
    """Minimal async Bot API client.

    Every call returns the decoded ``{"ok": true, ...}`` envelope and raises
    :class:`TelegramApiError` for anything else. ``timeout=None`` disables the
    httpx timeout entirely.
    """

    def __init__(
        self,
        token: str | None,
        *,
        api_base: str = TELEGRAM_API_BASE,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token or None
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> TelegramClient:
        token = settings.bot_api_token.get_secret_value() if settings.bot_api_token else None
        return cls(token, timeout=timeout, transport=transport)

    @property
    def enabled(self) -> bool:
        return self._token is not None

    def _method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._token}/{method}"

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    async def _call(
        self,
        method: str,
        payload: dict[str, Any] | None = None,
        *,
        http_method: str = "POST",
    ) -> dict[str, Any]:
        if not self.enabled:
            raise TelegramNotConfiguredError(f"BOT_API_TOKEN is not configured; cannot call {method}")

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            if http_method == "GET":
                response = await client.get(self._method_url(method))
            else:
                response = await client.post(self._method_url(method), json=payload or {})

        data = self._decode(response)
        if not response.is_success or not isinstance(data, dict) or not data.get("ok", False):
            raise TelegramApiError(method, response.status_code, data)
        return data

    async def get_me(self) -> dict[str, Any]:
        return await self._call("getMe", http_method="GET")

    async def get_webhook_info(self) -> dict[str, Any]:
        return await self._call("getWebhookInfo", http_method="GET")

    async def set_webhook(
        self,
        url: str,
        *,
        secret_token: str | None = None,
        allowed_updates: tuple[str, ...] = ALLOWED_UPDATES,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "url": url,
            "max_connections": max_connections,
            "allowed_updates": list(allowed_updates),
        }
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload)

    async def delete_webhook(self, *, drop_pending_updates: bool = True) -> dict[str, Any]:
        return await self._call("deleteWebhook", {"drop_pending_updates": drop_pending_updates})

    async def send_message(
        self,
        chat_id: str | int,
        text: str,
        *,
        disable_web_page_preview: bool = True,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if disable_web_page_preview:
            payload["disable_web_page_preview"] = True
        return await self._call("sendMessage", payload)
