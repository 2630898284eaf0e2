import httpx

from hellobot.telegram import TelegramApiError
from tests.conftest import TEST_BASE_URL, TEST_SECRET


def test_set_webhook_registers_public_url(client, telegram) -> None:
    telegram.results["setWebhook"] = {
        "ok": True,
        "result": True,
        "description": "Webhook was set",
    }

    response = client.get("/set-webhook")

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "result": {"ok": True, "result": True, "description": "Webhook was set"},
    }
    assert telegram.calls == [
        ("setWebhook", {"url": f"{TEST_BASE_URL}/webhook", "secret_token": TEST_SECRET})
    ]


def test_set_webhook_strips_trailing_slash_from_base_url(make_client, telegram) -> None:
    with make_client(base_url="https://bot.example.com/") as client:
        response = client.get("/set-webhook")

    assert response.status_code == 200
    assert telegram.calls[0][1]["url"] == "https://bot.example.com/webhook"


def test_set_webhook_without_secret_omits_it(make_client, telegram) -> None:
    with make_client(webhook_secret_token=None) as client:
        response = client.get("/set-webhook")

    assert response.status_code == 200
    assert telegram.calls == [("setWebhook", {"url": f"{TEST_BASE_URL}/webhook", "secret_token": None})]


def test_set_webhook_requires_base_url(make_client, telegram) -> None:
    with make_client(base_url=None) as client:
        response = client.get("/set-webhook")

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "BASE_URL not configured"}
    assert telegram.calls == []


def test_set_webhook_reports_telegram_rejection(client, telegram) -> None:
    rejection = {"ok": False, "error_code": 400, "description": "Bad Request: bad webhook"}
    telegram.failures["setWebhook"] = TelegramApiError("setWebhook", 400, rejection)

    response = client.get("/set-webhook")

    assert response.status_code == 500
    assert response.json() == {"ok": False, "status": 400, "data": rejection}


def test_set_webhook_reports_unreachable_telegram(client, telegram) -> None:
    telegram.failures["setWebhook"] = httpx.ConnectError("connection refused")

    response = client.get("/set-webhook")

    assert response.status_code == 502
    assert response.json() == {"ok": False, "error": "Telegram unreachable: ConnectError"}


def test_auto_init_resets_webhook_once(make_client, telegram) -> None:
    """The first requests trigger a single delete-then-set registration."""
    with make_client(auto_webhook_init=True) as client:
        assert client.get("/").status_code == 200
        assert client.get("/healthz").status_code == 200
        assert client.post("/webhook", json={"update_id": 1}).status_code == 401
        assert client.app.state.webhook_initializer.started is True

    assert telegram.calls == [
        ("deleteWebhook", {"drop_pending_updates": True}),
        ("setWebhook", {"url": f"{TEST_BASE_URL}/webhook", "secret_token": TEST_SECRET}),
    ]


def test_auto_init_disabled_by_default(client, telegram) -> None:
    assert client.get("/").status_code == 200
    assert client.app.state.webhook_initializer is None
    assert telegram.calls == []


def test_auto_init_errors_do_not_block_requests(make_client, telegram) -> None:
    telegram.failures["deleteWebhook"] = httpx.ConnectError("connection refused")
    telegram.failures["setWebhook"] = TelegramApiError("setWebhook", 401, {"ok": False})
    with make_client(auto_webhook_init=True) as client:
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "OK"

    assert telegram.methods() == ["deleteWebhook", "setWebhook"]


def test_auto_init_without_base_url_only_deletes(make_client, telegram) -> None:
    with make_client(auto_webhook_init=True, base_url=None) as client:
        assert client.get("/").status_code == 200

    assert telegram.methods() == ["deleteWebhook"]
