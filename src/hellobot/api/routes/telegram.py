"""Telegram webhook ingress and registration routes."""

import hmac
import logging
from typing import Annotated

from fastapi import APIRouter, Header, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from httpx import HTTPError
from pydantic import ValidationError

from hellobot.api.dependencies import AppSettings, BackgroundTracker, Registrar, Telegram
from hellobot.api.responses import (
    ack_response,
    bad_request_response,
    build_set_webhook_failure,
    unauthorized_response,
)
from hellobot.api.schemas.telegram import TelegramUpdate
from hellobot.api.schemas.webhook import SetWebhookFailure, SetWebhookResponse
from hellobot.core.observability import log_event
from hellobot.telegram import (
    SECRET_TOKEN_HEADER,
    TELEGRAM_CALL_EXCEPTIONS,
    TelegramApiError,
    TelegramClient,
    TelegramNotConfiguredError,
    build_greeting,
)
from hellobot.webhook import WebhookConfigurationError

router = APIRouter(tags=["telegram"])
logger = logging.getLogger(__name__)


async def _send_reply(client: TelegramClient, chat_id: int, text: str) -> None:
    """Deliver the greeting; failures are logged and never re-raised."""
    if not client.enabled:
        logger.warning("Reply to chat %s skipped: BOT_API_TOKEN is not configured", chat_id)
        return
    try:
        data = await client.send_message(chat_id, text)
    except TelegramApiError as exc:
        log_event(
            logger,
            level=logging.ERROR,
            event="telegram.send_message.failed",
            chat_id=chat_id,
            status=exc.status_code,
            data=exc.payload,
        )
        return
    except TELEGRAM_CALL_EXCEPTIONS:
        logger.exception("Telegram sendMessage raised for chat %s", chat_id)
        return

    result = data.get("result")
    message_id = result.get("message_id") if isinstance(result, dict) else None
    log_event(logger, event="telegram.send_message.ok", chat_id=chat_id, message_id=message_id)


@router.post(
    "/webhook",
    response_class=PlainTextResponse,
    responses={400: {"description": "Malformed update"}, 401: {"description": "Bad secret"}},
)
async def telegram_webhook(
    request: Request,
    settings: AppSettings,
    client: Telegram,
    tracker: BackgroundTracker,
    webhook_secret: Annotated[str | None, Header(alias=SECRET_TOKEN_HEADER)] = None,
) -> PlainTextResponse:
    """Greet the sender of an incoming Telegram message."""
    expected_secret = settings.webhook_secret_token
    if expected_secret is not None and not hmac.compare_digest(
        (webhook_secret or "").encode(),
        expected_secret.get_secret_value().encode(),
    ):
        log_event(logger, level=logging.WARNING, event="telegram.webhook.rejected")
        return unauthorized_response()

    # Decode errors are ValueErrors; deeply nested bodies exhaust the recursion limit.
    try:
        update = TelegramUpdate.model_validate(await request.json())
    except (ValueError, RecursionError, ValidationError) as exc:
        log_event(
            logger,
            level=logging.WARNING,
            event="telegram.webhook.invalid_body",
            error=type(exc).__name__,
        )
        return bad_request_response()

    message = update.effective_message
    if message is None or message.chat is None:
        log_event(logger, event="telegram.webhook.ignored", update_id=update.update_id)
        return ack_response()

    chat_id = message.chat.id
    greeting = build_greeting(message.from_user)
    tracker.spawn(
        _send_reply(client, chat_id, greeting),
        name=f"hellobot-reply-{update.update_id}",
    )
    log_event(
        logger,
        event="telegram.webhook.reply_scheduled",
        update_id=update.update_id,
        chat_id=chat_id,
    )
    return ack_response()


@router.get(
    "/set-webhook",
    response_model=SetWebhookResponse,
    responses={
        400: {"model": SetWebhookFailure},
        500: {"model": SetWebhookFailure},
        502: {"model": SetWebhookFailure},
    },
)
async def set_webhook(registrar: Registrar) -> SetWebhookResponse | JSONResponse:
    """Register ``BASE_URL/webhook`` with Telegram on demand."""
    try:
        data = await registrar.register()
    except (WebhookConfigurationError, TelegramNotConfiguredError) as exc:
        return build_set_webhook_failure(status_code=status.HTTP_400_BAD_REQUEST, error=str(exc))
    except TelegramApiError as exc:
        log_event(
            logger,
            level=logging.ERROR,
            event="telegram.webhook.set_failed",
            status=exc.status_code,
            data=exc.payload,
        )
        return build_set_webhook_failure(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            status=exc.status_code,
            data=exc.payload,
        )
    except HTTPError as exc:
        logger.exception("setWebhook request failed")
        return build_set_webhook_failure(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error=f"Telegram unreachable: {type(exc).__name__}",
        )
    return SetWebhookResponse(result=data)
