from functools import lru_cache

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from hellobot.core.logging import ALLOWED_LOG_LEVELS

LOCAL_ENVIRONMENTS = frozenset({"development", "dev", "local", "test"})


def _blank_to_none(value: object) -> object:
    """Treat empty and whitespace-only environment values as unset."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    app_name: str = Field(default="hellobot", validation_alias="APP_NAME")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    bot_api_token: SecretStr | None = Field(default=None, validation_alias="BOT_API_TOKEN")
    webhook_secret_token: SecretStr | None = Field(
        default=None,
        validation_alias="WEBHOOK_SECRET_TOKEN",
    )
    base_url: str | None = Field(default=None, validation_alias="BASE_URL")
    auto_webhook_init: bool = Field(default=False, validation_alias="AUTO_WEBHOOK_INIT")
    test_chat_id: str | None = Field(default=None, validation_alias="TEST_CHAT_ID")
    allow_insecure_webhook: bool = Field(
        default=False,
        validation_alias="ALLOW_INSECURE_WEBHOOK",
    )
    background_drain_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="BACKGROUND_DRAIN_TIMEOUT_SECONDS",
        gt=0,
    )

    @field_validator("bot_api_token", "webhook_secret_token", "test_chat_id", mode="before")
    @classmethod
    def normalize_blank(cls, value: object) -> object:
        """Map blank values to unset so optional features stay disabled."""
        return _blank_to_none(value)

    @field_validator("auto_webhook_init", "allow_insecure_webhook", mode="before")
    @classmethod
    def normalize_flag(cls, value: object) -> object:
        """Resolve a blank flag to False."""
        value = _blank_to_none(value)
        return False if value is None else value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        normalized = value.strip().upper()
        if normalized not in ALLOWED_LOG_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
            raise ValueError(f"Invalid LOG_LEVEL '{value}'. Expected one of: {allowed}")
        return normalized

    @field_validator("base_url", mode="before")
    @classmethod
    def normalize_base_url(cls, value: object) -> object:
        """Strip whitespace and one trailing slash from BASE_URL."""
        value = _blank_to_none(value)
        if value is None:
            return None
        normalized = str(value).strip()
        if normalized.endswith("/"):
            normalized = normalized[:-1]
        return normalized or None

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Require a bot token outside development/local/test."""
        environment = self.environment.strip().lower()
        if environment not in LOCAL_ENVIRONMENTS and self.bot_api_token is None:
            raise ValueError("BOT_API_TOKEN is required outside development/local/test")
        return self

    @property
    def is_local_environment(self) -> bool:
        return self.environment.strip().lower() in LOCAL_ENVIRONMENTS

    @property
    def webhook_url(self) -> str | None:
        """Public webhook URL registered with Telegram, if BASE_URL is set."""
        if self.base_url is None:
            return None
        return f"{self.base_url}/webhook"


class ScriptSettings(Settings):
    """Settings for the command-line tools.

    Values from the ``.env`` file take precedence over the process environment,
    which fills in keys the file leaves undefined or empty.
    """

    model_config = SettingsConfigDict(env_ignore_empty=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, dotenv_settings, env_settings, file_secret_settings


@lru_cache
def get_settings() -> Settings:
    """Build settings from environment variables."""
    return Settings()
