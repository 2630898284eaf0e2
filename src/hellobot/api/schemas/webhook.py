"""Response contracts for webhook registration."""

from typing import Any

from pydantic import BaseModel


class SetWebhookResponse(BaseModel):
    """Successful ``GET /set-webhook`` payload."""

    ok: bool = True
    result: dict[str, Any]


class SetWebhookFailure(BaseModel):
    """Failed ``GET /set-webhook`` payload.

    ``error`` is set for local failures (missing configuration, unreachable
    Telegram); ``status`` and ``data`` carry the Bot API's own rejection.
    """

    ok: bool = False
    error: str | None = None
    status: int | None = None
    data: Any = None
