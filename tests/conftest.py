import os

import pytest
from fastapi.testclient import TestClient

# Ensure settings are resolved from test env before app modules import.
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "INFO"
for _name in (
    "BOT_API_TOKEN",
    "WEBHOOK_SECRET_TOKEN",
    "BASE_URL",
    "AUTO_WEBHOOK_INIT",
    "TEST_CHAT_ID",
    "ALLOW_INSECURE_WEBHOOK",
):
    os.environ.pop(_name, None)

from hellobot.core.config import Settings, get_settings  # noqa: E402
from hellobot.main import create_app  # noqa: E402
from tests.fakes import FakeTelegramClient  # noqa: E402

TEST_SECRET = "test-webhook-secret"
TEST_BASE_URL = "https://bot.example.com"


def build_settings(**overrides: object) -> Settings:
    """Build settings isolated from any local .env file."""
    values: dict[str, object] = {
        "environment": "test",
        "bot_api_token": "123:test-token",
        "webhook_secret_token": TEST_SECRET,
        "base_url": TEST_BASE_URL,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def telegram() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def make_client(telegram: FakeTelegramClient):
    """Return a factory for lifespan-managed test clients.

    Background replies are drained when the ``with`` block exits, so assert
    on ``telegram.calls`` after leaving it.
    """

    def _make(**overrides: object) -> TestClient:
        return TestClient(create_app(settings=build_settings(**overrides), telegram_client=telegram))

    return _make


@pytest.fixture
def client(make_client):
    with make_client() as test_client:
        yield test_client
