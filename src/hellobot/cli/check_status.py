"""Verify the bot end to end: Telegram auth, webhook registration, service health.

Exit status is 0 only when every check passes.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx

from hellobot.cli.common import CLI_TIMEOUT_SECONDS, build_parser, fetch, load_settings
from hellobot.core.config import Settings
from hellobot.core.logging import configure_logging
from hellobot.telegram import (
    SECRET_TOKEN_HEADER,
    TELEGRAM_CALL_EXCEPTIONS,
    TelegramApiError,
    TelegramClient,
)

logger = logging.getLogger(__name__)
INVALID_SECRET = "__invalid__"


@dataclass(frozen=True)
class CheckResult:
    title: str
    ok: bool
    details: str


def _telegram_failure(method: str, exc: Exception) -> str:
    if isinstance(exc, TelegramApiError):
        return f"{method} failed: status={exc.status_code} desc={exc.description}"
    return f"{method} failed: status=0 desc={exc}"


def _format_timestamp(value: int) -> str:
    return datetime.fromtimestamp(value, tz=UTC).isoformat().replace("+00:00", "Z")


class StatusChecker:
    """Runs each check independently; one failure never skips the next."""

    def __init__(
        self,
        settings: Settings,
        *,
        timeout: float = CLI_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport
        self._telegram = TelegramClient.from_settings(
            settings,
            timeout=timeout,
            transport=transport,
        )

    async def check_telegram_auth(self) -> CheckResult:
        title = "Telegram auth (getMe)"
        if not self._telegram.enabled:
            return CheckResult(title, False, "BOT_API_TOKEN is missing")
        try:
            data = await self._telegram.get_me()
        except TELEGRAM_CALL_EXCEPTIONS as exc:
            return CheckResult(title, False, _telegram_failure("getMe", exc))
        me = data.get("result") or {}
        return CheckResult(title, True, f"Bot: @{me.get('username')} (id={me.get('id')})")

    async def check_webhook_info(self) -> CheckResult:
        title = "Telegram webhook info"
        try:
            data = await self._telegram.get_webhook_info()
        except TELEGRAM_CALL_EXCEPTIONS as exc:
            return CheckResult(title, False, _telegram_failure("getWebhookInfo", exc))

        info = data.get("result") or {}
        registered_url = info.get("url") or ""
        expected = self._settings.webhook_url
        url_ok = registered_url == expected if expected else bool(registered_url)

        details = f"url={registered_url or '<none>'}; pending={info.get('pending_update_count')}"
        if expected:
            details += f"; expected={expected}"
        if info.get("ip_address"):
            details += f"; ip={info['ip_address']}"
        if isinstance(info.get("max_connections"), int):
            details += f"; max_conn={info['max_connections']}"
        if isinstance(info.get("has_custom_certificate"), bool):
            details += f"; custom_cert={str(info['has_custom_certificate']).lower()}"
        if info.get("last_error_message"):
            details += f"; last_error_message={info['last_error_message']}"
        if info.get("last_error_date"):
            details += f"; last_error_date={_format_timestamp(info['last_error_date'])}"
        return CheckResult(title, url_ok, details)

    async def check_service_health(self, http: httpx.AsyncClient) -> CheckResult:
        title = "Service health (GET /)"
        base_url = self._settings.base_url
        if base_url is None:
            return CheckResult(title, False, "BASE_URL is missing")
        result = await fetch(http, "GET", f"{base_url}/")
        return CheckResult(title, result.ok, f"status={result.status} body={result.body_text()}")

    async def check_webhook_secret(self, http: httpx.AsyncClient) -> CheckResult:
        """Expect 200 with the configured secret and 401 with a wrong one.

        Without a configured secret the webhook is open to anyone, which only
        passes when ALLOW_INSECURE_WEBHOOK=true and both probes are accepted.
        """
        title = "Webhook secret enforcement"
        base_url = self._settings.base_url
        if base_url is None:
            return CheckResult(title, False, "BASE_URL is missing")

        secret = self._settings.webhook_secret_token
        secret_value = secret.get_secret_value() if secret else ""
        good = await fetch(
            http,
            "POST",
            f"{base_url}/webhook",
            headers={SECRET_TOKEN_HEADER: secret_value},
            json={"update_id": 1},
        )
        bad = await fetch(
            http,
            "POST",
            f"{base_url}/webhook",
            headers={SECRET_TOKEN_HEADER: INVALID_SECRET},
            json={"update_id": 2},
        )

        details = f"good={good.status}; bad={bad.status}; enforced={'yes' if secret else 'no'}"
        if secret:
            return CheckResult(title, good.status == 200 and bad.status == 401, details)
        if not self._settings.allow_insecure_webhook:
            return CheckResult(
                title,
                False,
                f"{details}; WEBHOOK_SECRET_TOKEN is not configured "
                "(set ALLOW_INSECURE_WEBHOOK=true to accept)",
            )
        return CheckResult(title, good.status == 200 and bad.status == 200, details)

    async def check_send_message(self, chat_id: str) -> CheckResult:
        title = "Direct sendMessage test (TEST_CHAT_ID)"
        text = f"Status probe @ {datetime.now(UTC).isoformat()}"
        try:
            data = await self._telegram.send_message(chat_id, text, disable_web_page_preview=False)
        except TELEGRAM_CALL_EXCEPTIONS as exc:
            return CheckResult(title, False, _telegram_failure("sendMessage", exc))
        result = data.get("result") or {}
        return CheckResult(title, True, f"message_id={result.get('message_id')}")

    async def run(self) -> list[CheckResult]:
        results = [
            await self.check_telegram_auth(),
            await self.check_webhook_info(),
        ]
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as http:
            results.append(await self.check_service_health(http))
            results.append(await self.check_webhook_secret(http))
        if self._settings.test_chat_id:
            results.append(await self.check_send_message(self._settings.test_chat_id))
        return results


def print_result(result: CheckResult) -> None:
    print(f"[{'PASS' if result.ok else 'FAIL'}] {result.title}")
    if result.details:
        print(f"  -> {result.details}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser(__doc__.splitlines()[0]).parse_args(argv)
    settings = load_settings(args.env_file)
    if settings is None:
        return 1
    configure_logging(settings.log_level)

    print("== Bot Status Verification ==")
    try:
        results = asyncio.run(StatusChecker(settings).run())
    except Exception:
        logger.exception("Unexpected error while checking status")
        return 1

    for result in results:
        print_result(result)
    all_ok = all(result.ok for result in results)
    print(f"\nOverall: {'PASS' if all_ok else 'FAIL'}")
    return 0 if all_ok else 1


if __name__ == "__main__":
    sys.exit(main())
