"""Telegram webhook payload contracts."""

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    """Sender profile fields used to build the greeting."""

    id: int
    is_bot: bool = False
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None


class TelegramChat(BaseModel):
    """Chat the reply is sent back to."""

    id: int
    type: str


class TelegramMessage(BaseModel):
    """Subset of Telegram message data required by the webhook."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    date: int
    chat: TelegramChat | None = None
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None


class TelegramUpdate(BaseModel):
    """Top-level Telegram update."""

    update_id: int
    message: TelegramMessage | None = None
    edited_message: TelegramMessage | None = None

    @property
    def effective_message(self) -> TelegramMessage | None:
        """Return ``message`` when present, else ``edited_message``."""
        if self.message is not None:
            return self.message
        return self.edited_message
