from fastapi import status
from fastapi.responses import JSONResponse, PlainTextResponse

from hellobot.api.schemas.webhook import SetWebhookFailure


def ack_response() -> PlainTextResponse:
    """Acknowledge a webhook delivery so Telegram does not redeliver it."""
    return PlainTextResponse("ok", status_code=status.HTTP_200_OK)


def unauthorized_response() -> PlainTextResponse:
    return PlainTextResponse("unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)


def bad_request_response() -> PlainTextResponse:
    return PlainTextResponse("bad request", status_code=status.HTTP_400_BAD_REQUEST)


def build_set_webhook_failure(*, status_code: int, **fields: object) -> JSONResponse:
    """Build a typed ``{"ok": false, ...}`` payload for /set-webhook."""
    payload = SetWebhookFailure.model_validate(fields)
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(mode="json", exclude_none=True),
    )
