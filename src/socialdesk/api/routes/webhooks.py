"""Provider webhook routes - Meta platforms.

GET  /webhooks/{provider}  subscription handshake (hub.challenge echo)
POST /webhooks/{provider}  event delivery

Providers: whatsapp, facebook, instagram, meta-pixel.
"""

import json
import os
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Header, Query, Request, Response
from fastapi.concurrency import run_in_threadpool

from socialdesk.observability.correlation import get_correlation_id
from socialdesk.observability.logging import get_logger
from socialdesk.observability.redaction import safe_log_context
from socialdesk.whatsapp.meta_adapter import (
    SignatureVerificationError,
    verify_signature,
    verify_subscription,
)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

logger = get_logger(__name__)


def _get_dispatcher(request: Request, provider: str) -> Any:
    return request.app.state.dispatchers.get(provider)


def _plain(status_code: int, content: str) -> Response:
    return Response(status_code=status_code, content=content, media_type="text/plain")


@router.get("/{provider}")
async def verify_webhook(
    provider: str,
    request: Request,
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
) -> Response:
    """Webhook subscription handshake.

    Returns:
        200 with hub.challenge verbatim if mode and token match.
        403 otherwise (challenge is never echoed).
        404 for an unknown provider.
    """
    if _get_dispatcher(request, provider) is None:
        return _plain(404, "Not Found")

    expected_token = os.environ.get("WEBHOOK_VERIFY_TOKEN", "")

    if verify_subscription(hub_mode, hub_verify_token, expected_token):
        logger.info(
            "webhook verification successful",
            extra={"extra_fields": safe_log_context(provider=provider)},
        )
        return _plain(200, hub_challenge or "")

    logger.warning(
        "webhook verification failed",
        extra={
            "extra_fields": safe_log_context(
                provider=provider,
                hub_mode=hub_mode or "missing",
                token_configured=bool(expected_token),
            )
        },
    )
    return _plain(403, "Forbidden")


@router.post("/{provider}")
async def receive_webhook(
    provider: str,
    request: Request,
    background_tasks: BackgroundTasks,
    x_hub_signature_256: str | None = Header(None, alias="X-Hub-Signature-256"),
) -> Response:
    """Receive a provider webhook delivery.

    Returns:
        200 "OK" when the envelope matches the provider,
        400 for an unparseable body, 401 for a bad signature,
        404 for a foreign discriminator or unknown provider,
        500 on an unhandled error.
    """
    dispatcher = _get_dispatcher(request, provider)
    if dispatcher is None:
        return _plain(404, "Not Found")

    correlation_id = get_correlation_id()

    try:
        body_bytes = await request.body()

        # Verify signature (if META_APP_SECRET configured)
        app_secret = os.environ.get("META_APP_SECRET", "")
        if app_secret:
            try:
                verify_signature(body_bytes, x_hub_signature_256 or "", app_secret)
            except SignatureVerificationError as e:
                logger.warning(
                    "webhook signature verification failed",
                    extra={
                        "extra_fields": safe_log_context(
                            correlationId=correlation_id, provider=provider, error=str(e)
                        )
                    },
                )
                return _plain(401, "Unauthorized")
        else:
            logger.warning(
                "META_APP_SECRET not configured - signature check skipped",
                extra={"extra_fields": safe_log_context(provider=provider)},
            )

        try:
            payload = json.loads(body_bytes)
        except ValueError:
            logger.warning(
                "invalid json body",
                extra={
                    "extra_fields": safe_log_context(
                        correlationId=correlation_id, provider=provider
                    )
                },
            )
            return _plain(400, "Bad Request")

        if request.app.state.async_dispatch:
            ack = dispatcher.handle(payload, schedule=background_tasks.add_task)
        else:
            ack = await run_in_threadpool(dispatcher.handle, payload)

    except Exception:
        logger.exception(
            "webhook processing failed",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id, provider=provider
                )
            },
        )
        return _plain(500, "Internal Server Error")

    return _plain(ack.status_code, ack.body)
