from pathlib import Path

import httpx

from hellobot.cli import check_status
from hellobot.cli.check_status import CheckResult, StatusChecker
from hellobot.core.config import Settings

TOKEN = "123:secret"
BASE_URL = "https://bot.example.com"
SECRET = "S1"


class _FakeProvider:
    """Serves both the Telegram Bot API and the deployed service."""

    def __init__(
        self,
        *,
        registered_url: str = f"{BASE_URL}/webhook",
        enforce_secret: str | None = SECRET,
        service_down: bool = False,
    ) -> None:
        self.registered_url = registered_url
        self.enforce_secret = enforce_secret
        self.service_down = service_down
        self.sent: list[bytes] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.telegram.org":
            method = request.url.path.rsplit("/", 1)[-1]
            if method == "getMe":
                return httpx.Response(
                    200, json={"ok": True, "result": {"id": 99, "username": "hello_bot"}}
                )
            if method == "getWebhookInfo":
                return httpx.Response(
                    200,
                    json={
                        "ok": True,
                        "result": {
                            "url": self.registered_url,
                            "pending_update_count": 0,
                            "max_connections": 40,
                            "has_custom_certificate": False,
                            "last_error_date": 1_700_000_000,
                            "last_error_message": "Connection timed out",
                        },
                    },
                )
            if method == "sendMessage":
                self.sent.append(request.content)
                return httpx.Response(200, json={"ok": True, "result": {"message_id": 5}})
            return httpx.Response(404, json={"ok": False, "description": "Not Found"})

        if self.service_down:
            raise httpx.ConnectError("connection refused")
        if request.url.path == "/":
            return httpx.Response(200, text="OK")
        if request.url.path == "/webhook":
            header = request.headers.get("X-Telegram-Bot-Api-Secret-Token")
            if self.enforce_secret is not None and header != self.enforce_secret:
                return httpx.Response(401, text="unauthorized")
            return httpx.Response(200, text="ok")
        return httpx.Response(404, text="not found")


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "bot_api_token": TOKEN,
        "base_url": BASE_URL,
        "webhook_secret_token": SECRET,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _checker(provider: _FakeProvider, **overrides: object) -> StatusChecker:
    return StatusChecker(_settings(**overrides), transport=httpx.MockTransport(provider))


async def test_all_checks_pass_for_healthy_deployment() -> None:
    results = await _checker(_FakeProvider()).run()

    assert [result.ok for result in results] == [True, True, True, True]
    assert results[0].details == "Bot: @hello_bot (id=99)"
    assert "expected=https://bot.example.com/webhook" in results[1].details
    assert "custom_cert=false" in results[1].details
    assert "last_error_date=2023-11-14T22:13:20Z" in results[1].details
    assert results[2].details == "status=200 body=OK"
    assert results[3].details == "good=200; bad=401; enforced=yes"


async def test_missing_token_fails_auth_check() -> None:
    result = await _checker(_FakeProvider(), bot_api_token=None).check_telegram_auth()
    assert result == CheckResult("Telegram auth (getMe)", False, "BOT_API_TOKEN is missing")


async def test_webhook_info_detects_mismatched_url() -> None:
    provider = _FakeProvider(registered_url="https://old.example.com/webhook")
    result = await _checker(provider).check_webhook_info()
    assert result.ok is False
    assert "url=https://old.example.com/webhook" in result.details


async def test_webhook_info_without_base_url_accepts_any_registration() -> None:
    result = await _checker(_FakeProvider(), base_url=None).check_webhook_info()
    assert result.ok is True


async def test_unreachable_service_fails_health_check() -> None:
    provider = _FakeProvider(service_down=True)
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider)) as http:
        result = await _checker(provider).check_service_health(http)
    assert result.ok is False
    assert result.details.startswith("status=0 ")


async def test_unenforced_secret_fails_check() -> None:
    """A service that accepts any secret is flagged even though both probes succeed."""
    provider = _FakeProvider(enforce_secret=None)
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider)) as http:
        result = await _checker(provider).check_webhook_secret(http)
    assert result.ok is False
    assert result.details == "good=200; bad=200; enforced=yes"


async def test_missing_secret_fails_unless_insecure_allowed() -> None:
    provider = _FakeProvider(enforce_secret=None)
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider)) as http:
        strict = await _checker(provider, webhook_secret_token=None).check_webhook_secret(http)
        relaxed = await _checker(
            provider,
            webhook_secret_token=None,
            allow_insecure_webhook=True,
        ).check_webhook_secret(http)

    assert strict.ok is False
    assert "WEBHOOK_SECRET_TOKEN is not configured" in strict.details
    assert relaxed.ok is True
    assert relaxed.details == "good=200; bad=200; enforced=no"


async def test_test_chat_probe_runs_only_when_configured() -> None:
    provider = _FakeProvider()
    results = await _checker(provider, test_chat_id="777").run()

    assert len(results) == 5
    assert results[-1] == CheckResult(
        "Direct sendMessage test (TEST_CHAT_ID)", True, "message_id=5"
    )
    assert b'"chat_id":"777"' in provider.sent[0].replace(b" ", b"")


def test_main_exit_code_reflects_results(monkeypatch, tmp_path: Path, capsys) -> None:
    outcomes = {
        "pass": [CheckResult("one", True, "fine")],
        "fail": [CheckResult("one", True, "fine"), CheckResult("two", False, "broken")],
    }

    class _StubChecker:
        mode = "pass"

        def __init__(self, settings: Settings) -> None:
            self.settings = settings

        async def run(self) -> list[CheckResult]:
            return outcomes[self.mode]

    monkeypatch.setattr(check_status, "StatusChecker", _StubChecker)
    env_file = tmp_path / ".env"
    env_file.write_text("BASE_URL=https://bot.example.com\n", encoding="utf-8")

    assert check_status.main(["--env-file", str(env_file)]) == 0
    output = capsys.readouterr().out
    assert "[PASS] one" in output
    assert "Overall: PASS" in output

    _StubChecker.mode = "fail"
    assert check_status.main(["--env-file", str(env_file)]) == 1
    output = capsys.readouterr().out
    assert "[FAIL] two\n  -> broken" in output
    assert "Overall: FAIL" in output


def test_main_fails_on_invalid_configuration(tmp_path: Path, capsys) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("ENVIRONMENT=production\n", encoding="utf-8")

    assert check_status.main(["--env-file", str(env_file)]) == 1
    assert "BOT_API_TOKEN is required" in capsys.readouterr().err


def test_main_rejects_invalid_log_level(tmp_path: Path, capsys) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=LOUD\n", encoding="utf-8")

    assert check_status.main(["--env-file", str(env_file)]) == 1
    captured = capsys.readouterr()
    assert "Invalid LOG_LEVEL 'LOUD'" in captured.err
    assert "Bot Status Verification" not in captured.out
